"""Tests for stream identifier helpers."""

import random

import pytest

from photo_stream.domain.identifiers import (
    STREAM_ID_PATTERN,
    generate_stream_id,
    is_valid_stream_id,
    parse_stream_id,
)


def test_generate_stream_id_matches_pattern() -> None:
    rng = random.Random(7)

    for _ in range(50):
        assert STREAM_ID_PATTERN.fullmatch(generate_stream_id(rng))


def test_generate_stream_id_without_rng() -> None:
    assert is_valid_stream_id(generate_stream_id())


@pytest.mark.parametrize(
    "candidate",
    [
        "bad-id",
        "abcd-efgh",
        "ABCD-EFG",
        "ABCDE-FGHI",
        "ABCD_EFGH",
        " ABCD-EFGH",
        "ABCD-EFGH\n",
        "ABCD-EFGH/..",
        "",
        None,
        12345678,
        ["ABCD-EFGH"],
    ],
)
def test_is_valid_stream_id_rejects_malformed(candidate: object) -> None:
    assert is_valid_stream_id(candidate) is False


def test_is_valid_stream_id_accepts_well_formed() -> None:
    assert is_valid_stream_id("ABCD-EFGH") is True


def test_parse_stream_id_prefers_query_param() -> None:
    url = "https://tv.example/phone.html?stream=wxyz-abcd"

    assert parse_stream_id(url) == "WXYZ-ABCD"


def test_parse_stream_id_falls_back_to_path() -> None:
    assert parse_stream_id("https://tv.example/abcd-efgh") == "ABCD-EFGH"


def test_parse_stream_id_returns_none_without_id() -> None:
    assert parse_stream_id("https://tv.example/phone.html") is None
