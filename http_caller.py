"""HTTP GET client for URL actions."""

import asyncio
import logging
from typing import Optional

import aiohttp

from constants import HTTP_REQUEST_TIMEOUT
from errors import DispatchError
from models import HttpAction

logger = logging.getLogger(__name__)


class HttpCaller:
    """Performs the HTTP GET behind an HttpAction."""

    def __init__(self, timeout: float = HTTP_REQUEST_TIMEOUT):
        self.timeout = timeout
        self.session: Optional[aiohttp.ClientSession] = None

    async def connect(self):
        """Open the shared client session."""
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
            logger.debug("HTTP session opened")

    async def close(self):
        """Close the client session."""
        if self.session and not self.session.closed:
            await self.session.close()
        self.session = None

    async def get(self, action: HttpAction) -> int:
        """Send the GET request; return the HTTP status code."""
        if self.session is None or self.session.closed:
            await self.connect()
        try:
            async with self.session.get(action.url) as resp:
                # body is only read for the log line
                body = await resp.text()
                logger.debug(f"GET {action.url} -> {resp.status} ({len(body)} bytes)")
                if resp.status >= 400:
                    raise DispatchError(action, f"HTTP status {resp.status}")
                return resp.status
        except asyncio.TimeoutError:
            raise DispatchError(action, f"timed out after {self.timeout}s")
        except aiohttp.ClientError as e:
            raise DispatchError(action, str(e)) from e
