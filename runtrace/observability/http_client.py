"""
Collector HTTP Client

Sends runs to the collector's /runs API.

DESIGN RULES (NON-NEGOTIABLE):
- POST to create, PATCH to finalize (no reads)
- Short, configurable timeout
- Non-2xx and network failures raise TransportError
- One httpx.AsyncClient per event loop, shared by every tracer using
  this client
"""

import asyncio
import logging
import threading
import weakref
from functools import lru_cache
from typing import Any, Dict, Optional
from uuid import UUID

import httpx

from runtrace.core.config import TracingSettings, get_settings
from runtrace.core.errors import ConfigurationError, TracingDisabledError, TransportError
from runtrace.observability.transport import RunTransport
from runtrace.schemas.run import Run, RunUpdate


logger = logging.getLogger(__name__)


class HttpRunClient(RunTransport):
    """
    httpx-backed transport for the collector.

    Requires an API key; the tenant id header is sent only when set.
    """

    def __init__(
        self,
        settings: Optional[TracingSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            settings: Explicit configuration. Defaults to get_settings().
            transport: Optional httpx transport (mock/ASGI transports in tests).

        Raises:
            ConfigurationError: if no API key is configured
        """
        self.settings = settings or get_settings()
        if not self.settings.api_key:
            raise ConfigurationError("LANGSMITH_API_KEY not set")

        self._transport = transport
        self._clients: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, httpx.AsyncClient]" = (
            weakref.WeakKeyDictionary()
        )
        self._lock = threading.Lock()

    @classmethod
    def from_env(cls) -> "HttpRunClient":
        return cls(get_settings())

    # ============================================================
    # CONNECTION HANDLING
    # ============================================================

    def _headers(self) -> Dict[str, str]:
        headers = {"x-api-key": self.settings.api_key}
        if self.settings.tenant_id:
            headers["x-tenant-id"] = self.settings.tenant_id
        return headers

    def _http(self) -> httpx.AsyncClient:
        """The AsyncClient bound to the running event loop."""
        loop = asyncio.get_running_loop()
        with self._lock:
            client = self._clients.get(loop)
            if client is None or client.is_closed:
                client = httpx.AsyncClient(
                    headers=self._headers(),
                    timeout=self.settings.timeout_ms / 1000.0,
                    transport=self._transport,
                )
                self._clients[loop] = client
            return client

    async def aclose(self) -> None:
        """Close the AsyncClient bound to the running loop."""
        loop = asyncio.get_running_loop()
        with self._lock:
            client = self._clients.pop(loop, None)
        if client is not None:
            await client.aclose()

    # ============================================================
    # LOW-LEVEL HTTP
    # ============================================================

    async def _send(self, method: str, url: str, payload: Dict[str, Any]) -> None:
        if not self.settings.tracing:
            raise TracingDisabledError()

        try:
            response = await self._http().request(method, url, json=payload)
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {url} failed: {e}") from e

        if not response.is_success:
            body = response.text
            raise TransportError(
                f"HTTP {response.status_code}: {body}",
                status_code=response.status_code,
                body=body,
            )

    # ============================================================
    # PUBLIC API
    # ============================================================

    async def create_run(self, run: Run) -> None:
        await self._send("POST", self.settings.runs_url, run.to_create_payload())

    async def update_run(self, run_id: UUID, update: RunUpdate) -> None:
        await self._send("PATCH", f"{self.settings.runs_url}/{run_id}", update.to_payload())


@lru_cache(maxsize=1)
def get_default_client() -> HttpRunClient:
    """
    Process-wide client built from the environment.

    Shared by every tracer created without an explicit transport, so a
    parent and its children always use the same connection pool.

    Raises:
        ConfigurationError: if no API key is configured (not cached)
    """
    return HttpRunClient.from_env()
