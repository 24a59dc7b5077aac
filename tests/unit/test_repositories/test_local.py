"""Unit tests for the local feed repository."""

from pathlib import Path

import pytest

from plugin_generator.exceptions import FetchError, PackageNotFoundError
from plugin_generator.models import PackageRef
from plugin_generator.repositories import LocalFeedRepository


@pytest.mark.asyncio
async def test_get_metadata(add_package, local_repository):
    add_package("Contoso.Analyzers", "1.2.0", dependencies=[("Contoso.Core", "1.0.0")], license_required=True)

    metadata = await local_repository.get_metadata(PackageRef("contoso.analyzers", "1.2"))

    assert metadata.ref.id == "Contoso.Analyzers"
    assert metadata.license_required is True
    assert metadata.dependencies == [PackageRef("Contoso.Core", "1.0.0")]


@pytest.mark.asyncio
async def test_get_metadata_finds_nested_packages(feed_dir, nupkg_builder, local_repository):
    nupkg_builder(feed_dir / "contoso.core" / "1.0.0", "Contoso.Core", "1.0.0")

    metadata = await local_repository.get_metadata(PackageRef("Contoso.Core", "1.0.0"))

    assert metadata.ref == PackageRef("Contoso.Core", "1.0.0")


@pytest.mark.asyncio
async def test_get_metadata_missing_package(add_package, local_repository):
    add_package("Contoso.Analyzers", "1.2.0")

    with pytest.raises(PackageNotFoundError) as exc_info:
        await local_repository.get_metadata(PackageRef("Contoso.Analyzers", "9.9.9"))

    assert exc_info.value.ref == PackageRef("Contoso.Analyzers", "9.9.9")
    assert "local feed" in exc_info.value.reason


@pytest.mark.asyncio
async def test_missing_feed_directory(tmp_path):
    repository = LocalFeedRepository(tmp_path / "nowhere")

    with pytest.raises(FetchError, match="does not exist"):
        await repository.get_metadata(PackageRef("Foo", "1.0.0"))


@pytest.mark.asyncio
async def test_invalid_packages_are_skipped(feed_dir, add_package, local_repository):
    (feed_dir / "broken.1.0.0.nupkg").write_bytes(b"garbage")
    add_package("Good", "1.0.0")

    metadata = await local_repository.get_metadata(PackageRef("Good", "1.0.0"))

    assert metadata.ref.id == "Good"


@pytest.mark.asyncio
async def test_unreadable_packages_are_skipped(feed_dir, add_package, local_repository):
    (feed_dir / "folder.1.0.0.nupkg").mkdir()
    add_package("Good", "1.0.0")

    metadata = await local_repository.get_metadata(PackageRef("Good", "1.0.0"))

    assert metadata.ref.id == "Good"


@pytest.mark.asyncio
async def test_get_metadata_matches_equivalent_version_spelling(add_package, local_repository):
    add_package("Contoso.Core", "1.0.0")

    metadata = await local_repository.get_metadata(PackageRef("Contoso.Core", "1.0.0.0"))

    assert metadata.ref.version == "1.0.0"


@pytest.mark.asyncio
async def test_download_payload_copies_package(add_package, local_repository, tmp_path):
    source = add_package("Contoso.Analyzers", "1.2.0", analyzers=["analyzers/dotnet/cs/A.dll"])
    destination_dir = tmp_path / "downloads"

    path = await local_repository.download_payload(PackageRef("Contoso.Analyzers", "1.2.0"), destination_dir)

    assert path == destination_dir / "contoso.analyzers.1.2.0.nupkg"
    assert path.read_bytes() == source.read_bytes()


@pytest.mark.asyncio
async def test_context_manager(feed_dir: Path):
    async with LocalFeedRepository(feed_dir) as repository:
        assert repository.name == f"local feed {feed_dir}"
