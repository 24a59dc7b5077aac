import pytest

from plugin_generator.licenses import normalize_license, spdx_url


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("MIT", "MIT"),
        ("Apache-2.0", "Apache-2.0"),
        ("MS-PL", "MS-PL"),
        ("MIT License", "MIT"),
        ("Apache License, Version 2.0", "Apache-2.0"),
        ("Microsoft Public License", "MS-PL"),
    ],
)
def test_normalize_license(text, expected):
    link = normalize_license(text)
    assert link is not None
    assert link.spdx_id == expected
    assert link.name == text
    assert link.url == spdx_url(expected)


def test_normalize_license_keeps_compound_expression():
    link = normalize_license("MIT OR Apache-2.0")
    assert link is not None
    assert link.spdx_id == "MIT OR Apache-2.0"


@pytest.mark.parametrize("text", [None, "", "   "])
def test_normalize_license_empty(text):
    assert normalize_license(text) is None


def test_normalize_license_unknown():
    assert normalize_license("Contoso Internal Use Only") is None


def test_spdx_url():
    assert spdx_url("MIT") == "https://spdx.org/licenses/MIT.html"
