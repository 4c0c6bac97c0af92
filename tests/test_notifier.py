"""
Tests for the HTTP gesture notifier, using httpx.MockTransport.
"""

import asyncio
import json

import httpx

from gesture_presenter.message import GestureMessage
from gesture_presenter.notifier import GestureNotifier

URL = "https://presenter.test/send_gesture"


def make_notifier(handler, **kwargs):
    return GestureNotifier(endpoint_url=URL, transport=httpx.MockTransport(handler), **kwargs)


class TestGestureNotifier:

    def test_send_posts_json(self):
        seen = []

        def handler(request):
            seen.append((request.method, str(request.url), json.loads(request.content)))
            return httpx.Response(200, json={"status": "ok"})

        async def scenario():
            notifier = make_notifier(handler)
            await notifier.start()
            try:
                return await notifier.send(GestureMessage("ABC", "Right"))
            finally:
                await notifier.stop()

        assert asyncio.run(scenario()) is True
        assert seen == [("POST", URL, {"code": "ABC", "gesture": "Right"})]

    def test_queued_message_is_sent(self):
        seen = []

        def handler(request):
            seen.append(json.loads(request.content))
            return httpx.Response(200, text="ok")

        async def scenario():
            notifier = make_notifier(handler)
            await notifier.start()
            try:
                assert notifier.notify(GestureMessage("ABC", "Left"))
                for _ in range(100):
                    if notifier.stats.messages_sent:
                        break
                    await asyncio.sleep(0.01)
                return notifier.get_stats()
            finally:
                await notifier.stop()

        stats = asyncio.run(scenario())
        assert stats["messages_sent"] == 1
        assert seen == [{"code": "ABC", "gesture": "Left"}]

    def test_error_status_calls_on_failure(self):
        failures = []

        async def on_failure():
            failures.append(True)

        async def scenario():
            notifier = make_notifier(lambda request: httpx.Response(404), on_failure=on_failure)
            await notifier.start()
            try:
                ok = await notifier.send(GestureMessage("BAD", "Right"))
                return ok, notifier.get_stats()
            finally:
                await notifier.stop()

        ok, stats = asyncio.run(scenario())
        assert ok is False
        assert failures == [True]
        assert stats["messages_failed"] == 1
        assert stats["messages_sent"] == 0
        assert stats["last_error"]

    def test_network_error_calls_on_failure(self):
        failures = []

        async def on_failure():
            failures.append(True)

        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async def scenario():
            notifier = make_notifier(handler, on_failure=on_failure)
            await notifier.start()
            try:
                return await notifier.send(GestureMessage("ABC", "Left"))
            finally:
                await notifier.stop()

        assert asyncio.run(scenario()) is False
        assert failures == [True]

    def test_success_callback(self):
        delivered = []

        async def on_success(message):
            delivered.append(message.gesture)

        async def scenario():
            notifier = make_notifier(lambda request: httpx.Response(200), on_success=on_success)
            await notifier.start()
            try:
                await notifier.send(GestureMessage("ABC", "Right"))
            finally:
                await notifier.stop()

        asyncio.run(scenario())
        assert delivered == ["Right"]

    def test_notify_when_stopped(self):
        notifier = make_notifier(lambda request: httpx.Response(200))
        assert notifier.notify(GestureMessage("ABC", "Right")) is False
        assert notifier.get_stats()["messages_failed"] == 1
