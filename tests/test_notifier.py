import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from quizbot.services.notifier import Redirector, WebhookNotifier


@pytest.fixture
async def webhook_server():
    received = []

    async def accept(request: web.Request) -> web.Response:
        received.append(await request.json())
        return web.json_response({"ok": True})

    async def reject(request: web.Request) -> web.Response:
        return web.Response(status=500, text="nope")

    app = web.Application()
    app.router.add_post("/hook", accept)
    app.router.add_post("/broken", reject)
    server = TestServer(app)
    await server.start_server()
    try:
        yield server, received
    finally:
        await server.close()


async def test_send_posts_json_payload(webhook_server):
    server, received = webhook_server
    notifier = WebhookNotifier(str(server.make_url("/hook")))

    assert await notifier.send({"name": "Spanish Learner", "score": "{}"}) is True
    assert received == [{"name": "Spanish Learner", "score": "{}"}]


async def test_dispatch_is_fire_and_forget(webhook_server):
    server, received = webhook_server
    notifier = WebhookNotifier(str(server.make_url("/hook")))

    task = notifier.dispatch({"quizz-id": "fall-sale"})
    assert task is not None
    assert await task is True
    assert received == [{"quizz-id": "fall-sale"}]


async def test_non_2xx_response_is_reported_not_raised(webhook_server):
    server, _ = webhook_server
    notifier = WebhookNotifier(str(server.make_url("/broken")))
    assert await notifier.send({}) is False


async def test_connection_error_is_reported_not_raised(unused_tcp_port):
    notifier = WebhookNotifier(f"http://127.0.0.1:{unused_tcp_port}/hook", timeout=2)
    assert await notifier.send({}) is False


@pytest.mark.parametrize("url", [None, "", "   "])
def test_missing_url_skips_dispatch(url):
    notifier = WebhookNotifier(url)
    assert not notifier.enabled
    assert notifier.dispatch({"name": "x"}) is None


class RecordingNavigation:
    def __init__(self):
        self.urls = []

    async def __call__(self, url):
        self.urls.append(url)


class RecordingHost:
    def __init__(self, fail=False):
        self.messages = []
        self.fail = fail

    async def post_message(self, message):
        if self.fail:
            raise ConnectionError("host went away")
        self.messages.append(message)


async def test_redirect_prefers_embedding_host():
    navigate, host = RecordingNavigation(), RecordingHost()
    route = await Redirector(navigate, host=host).redirect("https://offer")

    assert route == "host"
    assert host.messages == [{"action": "redirect", "url": "https://offer"}]
    assert navigate.urls == []


async def test_redirect_without_host_navigates_directly():
    navigate = RecordingNavigation()
    assert await Redirector(navigate).redirect("https://offer") == "direct"
    assert navigate.urls == ["https://offer"]


async def test_redirect_falls_back_when_host_raises():
    navigate = RecordingNavigation()
    route = await Redirector(navigate, host=RecordingHost(fail=True)).redirect("https://offer")
    assert route == "direct"
    assert navigate.urls == ["https://offer"]
