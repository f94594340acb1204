"""Stream identifier generation and validation."""

import random
import re
import string
from urllib.parse import parse_qs, urlsplit

STREAM_ID_PATTERN = re.compile(r"[A-Z]{4}-[A-Z]{4}")
_LINK_PATTERN = re.compile(r"([A-Za-z]{4}-[A-Za-z]{4})")
_GROUP_LENGTH = 4


def generate_stream_id(rng: random.Random | None = None) -> str:
    """Return a new identifier made of two random 4-letter groups."""
    source = rng or random.Random()  # noqa: S311
    return f"{_random_letters(source)}-{_random_letters(source)}"


def is_valid_stream_id(candidate: object) -> bool:
    """Return true when the candidate is a well-formed stream identifier."""
    return isinstance(candidate, str) and STREAM_ID_PATTERN.fullmatch(candidate) is not None


def parse_stream_id(url: str) -> str | None:
    """Extract a stream identifier from a phone link.

    The ``stream`` query parameter wins; otherwise the first ``XXXX-XXXX``
    run in the path is used. The result is upper-cased.
    """
    parts = urlsplit(url)
    values = parse_qs(parts.query).get("stream")
    if values and values[0]:
        return values[0].upper()
    match = _LINK_PATTERN.search(parts.path)
    if match:
        return match.group(1).upper()
    return None


def _random_letters(source: random.Random) -> str:
    return "".join(
        source.choice(string.ascii_uppercase) for _ in range(_GROUP_LENGTH)
    )
