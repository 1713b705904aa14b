"""Publishing committed events to the Redis channel."""

import json

import redis

from bondline import realtime


class RecordingRedis:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.messages = []

    def publish(self, channel, payload):
        if self.fail:
            raise redis.exceptions.ConnectionError("connection refused")
        self.messages.append((channel, payload))
        return 1


def test_publishes_each_event_on_one_client(monkeypatch):
    client = RecordingRedis()
    monkeypatch.setattr(realtime, "get_redis_sync", lambda: client)

    realtime.publish_event_sync({"type": "token.minted", "buyer": 1})
    realtime.publish_event_sync({"type": "token.burned", "seller": 1})

    assert [channel for channel, _ in client.messages] == [realtime.CHANNEL] * 2
    assert [json.loads(payload)["type"] for _, payload in client.messages] == ["token.minted", "token.burned"]


def test_redis_outage_does_not_fail_the_caller(monkeypatch, caplog):
    monkeypatch.setattr(realtime, "get_redis_sync", lambda: RecordingRedis(fail=True))

    realtime.publish_event_sync({"type": "token.minted"})

    assert "token.minted" in caplog.text


def test_sync_client_is_created_once(monkeypatch):
    created = []
    monkeypatch.setattr(realtime, "_redis_sync", None)
    monkeypatch.setattr(realtime.redis_sync, "from_url", lambda url, **kw: created.append(url) or RecordingRedis())

    first = realtime.get_redis_sync()
    assert realtime.get_redis_sync() is first
    assert created == [realtime.REDIS_URL]
