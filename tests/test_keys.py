"""Tests for the storage key namespace."""

import re

import pytest

from photo_stream.services.keys import KNOWN_EXTENSIONS, KeyNamespace, extension_for


@pytest.mark.parametrize(
    ("content_type", "expected"),
    [
        ("image/png", "png"),
        ("IMAGE/PNG", "png"),
        ("image/webp", "webp"),
        ("image/heic", "heic"),
        ("image/heif", "heic"),
        ("image/jpeg", "jpg"),
        ("application/octet-stream", "jpg"),
        ("", "jpg"),
        (None, "jpg"),
    ],
)
def test_extension_for_content_type(content_type: str | None, expected: str) -> None:
    assert extension_for(content_type) == expected


def test_prefix_for_uses_base_prefix() -> None:
    keys = KeyNamespace()

    assert keys.prefix_for("ABCD-EFGH") == "photo-stream/ABCD-EFGH/"


def test_prefix_for_tolerates_trailing_slash() -> None:
    keys = KeyNamespace(base_prefix="photos/")

    assert keys.prefix_for("ABCD-EFGH") == "photos/ABCD-EFGH/"


def test_new_key_layout() -> None:
    keys = KeyNamespace(clock=lambda: 1700000000123)

    key = keys.new_key("ABCD-EFGH", "image/png")

    assert key.startswith(keys.prefix_for("ABCD-EFGH"))
    assert re.fullmatch(r"photo-stream/ABCD-EFGH/1700000000123-[0-9a-f]{16}\.png", key)
    assert key.rsplit(".", 1)[-1] in KNOWN_EXTENSIONS


def test_new_keys_are_distinct() -> None:
    keys = KeyNamespace(clock=lambda: 1)

    generated = {keys.new_key("ABCD-EFGH", "image/jpeg") for _ in range(100)}

    assert len(generated) == 100


def test_filename_for_strips_prefix() -> None:
    keys = KeyNamespace()
    key = keys.new_key("ABCD-EFGH", "image/heic")

    filename = keys.filename_for("ABCD-EFGH", key)

    assert "/" not in filename
    assert keys.prefix_for("ABCD-EFGH") + filename == key
