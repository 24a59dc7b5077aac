from pathlib import Path

import pytest

from plugin_generator.config import (
    ENV_FEED,
    ENV_MAX_CONCURRENCY,
    ENV_TIMEOUT,
    GeneratorSettings,
)
from plugin_generator.repositories import NUGET_ORG_FEED, LocalFeedRepository, NuGetRepository


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (ENV_FEED, ENV_MAX_CONCURRENCY, ENV_TIMEOUT):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = GeneratorSettings.from_env()
    assert settings.feed == NUGET_ORG_FEED
    assert settings.max_concurrency == 4
    assert settings.request_timeout == 30.0
    assert settings.download_dir is None


def test_environment_values(monkeypatch):
    monkeypatch.setenv(ENV_FEED, "https://feed.example/v3/index.json")
    monkeypatch.setenv(ENV_MAX_CONCURRENCY, "8")
    monkeypatch.setenv(ENV_TIMEOUT, "12.5")

    settings = GeneratorSettings.from_env()

    assert settings.feed == "https://feed.example/v3/index.json"
    assert settings.max_concurrency == 8
    assert settings.request_timeout == 12.5


def test_overrides_win_over_environment(monkeypatch, tmp_path):
    monkeypatch.setenv(ENV_MAX_CONCURRENCY, "8")

    settings = GeneratorSettings.from_env(max_concurrency=2, feed=None, download_dir=tmp_path)

    assert settings.max_concurrency == 2
    assert settings.feed == NUGET_ORG_FEED
    assert settings.download_dir == tmp_path


def test_invalid_environment_number(monkeypatch):
    monkeypatch.setenv(ENV_MAX_CONCURRENCY, "many")

    with pytest.raises(ValueError):
        GeneratorSettings.from_env()


def test_create_repository_for_local_directory(tmp_path: Path):
    repository = GeneratorSettings(feed=str(tmp_path)).create_repository()

    assert isinstance(repository, LocalFeedRepository)
    assert repository.root == tmp_path


def test_create_repository_for_url():
    repository = GeneratorSettings(feed="https://feed.example/v3/index.json", request_timeout=5).create_repository()

    assert isinstance(repository, NuGetRepository)
    assert repository.feed_url == "https://feed.example/v3/index.json"
    assert repository.timeout == 5
