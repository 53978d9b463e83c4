import json
import queue

import pytest

from src.crm_core.crm_core.common.tokens import SignedTokenService
from src.crm_core.crm_core.core.exceptions import AuthenticationError
from src.crm_core.crm_core.notifications.channel import LiveChannel, QueueSession, format_sse
from src.crm_core.crm_core.notifications.registry import SessionRegistry


@pytest.fixture
def tokens():
    return SignedTokenService("test-secret", max_age_seconds=60)


def test_open_requires_a_valid_token(tokens):
    registry = SessionRegistry()
    channel = LiveChannel(registry, tokens, keepalive_seconds=0.01)

    with pytest.raises(AuthenticationError):
        channel.open(None)
    with pytest.raises(AuthenticationError):
        channel.open("not-a-token")

    assert registry.is_connected(1) is False


def test_token_signed_with_other_secret_is_refused(tokens):
    forged = SignedTokenService("other-secret").issue(1)

    with pytest.raises(AuthenticationError):
        tokens.verify(forged)


def test_stream_yields_broadcast_events_and_unregisters_on_close(tokens):
    registry = SessionRegistry()
    channel = LiveChannel(registry, tokens, keepalive_seconds=0.01)
    session = channel.open(tokens.issue(7))
    assert registry.is_connected(7)

    frames = channel.stream(session)
    assert next(frames) == ": connected\n\n"

    registry.broadcast(7, {"event": "notification", "data": {"title": "Hi"}})
    assert next(frames) == 'event: notification\ndata: {"title":"Hi"}\n\n'
    assert next(frames) == ": keepalive\n\n"

    channel.close(session)
    assert list(frames) == []
    assert registry.is_connected(7) is False


def test_generator_close_unregisters_the_session(tokens):
    registry = SessionRegistry()
    channel = LiveChannel(registry, tokens, keepalive_seconds=0.01)
    session = channel.open(tokens.issue(3))

    frames = channel.stream(session)
    next(frames)
    frames.close()

    assert registry.is_connected(3) is False


def test_full_queue_rejects_events():
    session = QueueSession(1, maxsize=1)
    session.send({"event": "notification", "data": 1})

    with pytest.raises(queue.Full):
        session.send({"event": "notification", "data": 2})


def test_format_sse_defaults_event_name():
    frame = format_sse({"data": {"a": 1}})

    assert frame.startswith("event: message\n")
    assert json.loads(frame.split("data: ", 1)[1]) == {"a": 1}


def test_overflowing_session_is_dropped_and_its_stream_ends(tokens):
    registry = SessionRegistry()
    channel = LiveChannel(registry, tokens, keepalive_seconds=0.01)
    session = QueueSession(7, maxsize=1)
    registry.register(7, session)

    assert registry.broadcast(7, {"event": "notification", "data": 1}) == 1
    assert registry.broadcast(7, {"event": "notification", "data": 2}) == 0
    assert registry.is_connected(7) is False
    assert session.closed

    assert list(channel.stream(session)) == [": connected\n\n"]


def test_close_on_a_full_queue_still_ends_the_stream(tokens):
    registry = SessionRegistry()
    channel = LiveChannel(registry, tokens, keepalive_seconds=0.01)
    session = QueueSession(4, maxsize=1)
    registry.register(4, session)
    session.send({"event": "notification", "data": 1})

    channel.close(session)

    assert list(channel.stream(session)) == [": connected\n\n"]
    assert registry.is_connected(4) is False
