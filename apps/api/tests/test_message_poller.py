"""
Tests for the SSE message poller.

The poller is driven directly with a fake loader and a no-op sleep so no
real time passes and no HTTP stream is held open.
"""
import asyncio
import json

from services.message_poller import format_sse, poll_messages


async def _never_disconnected():
    return False


async def _no_sleep(_interval):
    return None


def _collect(gen):
    async def run():
        return [chunk async for chunk in gen]

    return asyncio.run(run())


def _parse(chunk: bytes):
    event_line, data_line = chunk.decode("utf-8").strip().split("\n")
    return event_line[len("event: "):], json.loads(data_line[len("data: "):])


class TestFormatSse:

    def test_event_framing(self):
        assert format_sse("messages", [{"body": "hi"}]) == b'event: messages\ndata: [{"body": "hi"}]\n\n'


class TestPollMessages:

    def test_sends_full_snapshot_every_tick(self):
        snapshots = iter([[{"body": "a"}], [{"body": "a"}, {"body": "b"}]])
        sleeps = []

        async def record_sleep(interval):
            sleeps.append(interval)

        chunks = _collect(
            poll_messages(lambda: next(snapshots), _never_disconnected, 5.0, sleep=record_sleep, max_ticks=2)
        )

        assert [_parse(c) for c in chunks] == [
            ("messages", [{"body": "a"}]),
            ("messages", [{"body": "a"}, {"body": "b"}]),
        ]
        assert sleeps == [5.0, 5.0]

    def test_stops_when_client_disconnects(self):
        calls = {"load": 0, "checks": 0}

        def load():
            calls["load"] += 1
            return []

        async def disconnect_after_first():
            calls["checks"] += 1
            return calls["checks"] > 1

        chunks = _collect(poll_messages(load, disconnect_after_first, 1.0, sleep=_no_sleep, max_ticks=10))
        assert len(chunks) == 1
        assert calls["load"] == 1

    def test_failed_load_yields_error_and_keeps_polling(self):
        results = iter([RuntimeError("db down"), [{"body": "back"}]])

        def load():
            item = next(results)
            if isinstance(item, Exception):
                raise item
            return item

        chunks = _collect(poll_messages(load, _never_disconnected, 1.0, sleep=_no_sleep, max_ticks=2))
        events = [_parse(c) for c in chunks]
        assert events[0][0] == "error"
        assert events[1] == ("messages", [{"body": "back"}])


class TestStreamEndpointAccess:

    def test_outsider_cannot_open_stream(self, client, coach, athlete, make_athlete, auth_headers):
        resp = client.post(
            "/v1/conversations", json={"athlete_id": str(athlete.id)}, headers=auth_headers(coach)
        )
        conversation_id = resp.json()["id"]
        outsider = make_athlete()
        resp = client.get(f"/v1/conversations/{conversation_id}/stream", headers=auth_headers(outsider))
        assert resp.status_code == 404
