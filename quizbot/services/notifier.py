import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol, Set

import aiohttp


class WebhookNotifier:
    """
    Fire-and-forget delivery of the completion payload to an operator webhook.
    Failures are logged and never retried.
    """

    def __init__(self, url: Optional[str], timeout: float = 10.0):
        self.url = url.strip() if url else None
        self.timeout = timeout
        self._tasks: Set[asyncio.Task] = set()

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    def dispatch(self, payload: Dict[str, Any]) -> Optional[asyncio.Task]:
        if not self.enabled:
            logging.info("No completion webhook URL configured, skipping.")
            return None

        logging.info("Sending completion webhook...")
        task = asyncio.get_running_loop().create_task(self.send(payload))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def send(self, payload: Dict[str, Any]) -> bool:
        try:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(self.url, json=payload) as response:
                    if 200 <= response.status < 300:
                        logging.info(f"Completion webhook sent successfully (HTTP {response.status}).")
                        return True
                    body = await response.text()
                    logging.error(f"Completion webhook rejected: HTTP {response.status} {body[:200]}")
                    return False
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logging.error(f"Completion webhook send failed: {e}")
            return False


class HostChannel(Protocol):
    """An embedding context that can take over the redirect."""

    async def post_message(self, message: Dict[str, Any]) -> None: ...


Navigate = Callable[[str], Awaitable[None]]


class Redirector:
    """Hands the redirect to the embedding host, or navigates directly."""

    def __init__(self, navigate: Navigate, host: Optional[HostChannel] = None):
        self._navigate = navigate
        self._host = host

    async def redirect(self, url: str) -> str:
        logging.info(f"Sending redirect message for URL: {url}")
        if self._host is None:
            logging.info("No embedding host, redirecting directly.")
            await self._navigate(url)
            return "direct"

        try:
            await self._host.post_message({"action": "redirect", "url": url})
        except Exception as e:
            logging.error(f"Error sending redirect message to host: {e}")
            await self._navigate(url)
            return "direct"
        return "host"
