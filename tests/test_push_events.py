"""Tests for push channel framing."""

from photo_stream.domain.events import JoinedStream
from photo_stream.push_events import REFRESH_EVENTS, PushEvent, push_message


def test_push_message_with_and_without_data() -> None:
    assert push_message(PushEvent.PONG) == {"type": "pong"}
    assert push_message("photoAdded", {"key": "k"}) == {
        "type": "photoAdded",
        "data": {"key": "k"},
    }


def test_refresh_events_are_change_notices() -> None:
    assert REFRESH_EVENTS == {"photoAdded", "streamCleared"}
    assert PushEvent.JOINED_STREAM.value not in REFRESH_EVENTS


def test_joined_stream_ack_frame() -> None:
    ack = JoinedStream(stream_id="ABCD-EFGH")

    assert push_message(ack.event, ack.payload()) == {
        "type": "joinedStream",
        "data": {"streamId": "ABCD-EFGH"},
    }
