"""
Test Support

Helpers for tests of runtrace and of code instrumented with it:
- reset_settings(): drop the cached environment configuration and default client
- RecordingTransport: in-memory transport that counts and records calls
- build_collector_app(): FastAPI app imitating the collector /runs API,
  for use with httpx.ASGITransport

Not for production use.
"""

from typing import List, Optional, Tuple
from uuid import UUID

from fastapi import FastAPI, HTTPException, Request

from runtrace.core.config import get_settings
from runtrace.core.errors import TransportError
from runtrace.observability.http_client import get_default_client
from runtrace.observability.transport import RunTransport
from runtrace.schemas.run import Run, RunUpdate


def reset_settings() -> None:
    """Forget cached settings and the default client so the next read sees the current environment."""
    get_settings.cache_clear()
    get_default_client.cache_clear()


class RecordingTransport(RunTransport):
    """
    Transport that keeps every call in memory.

    Args:
        fail: If True, every call is recorded and then raises TransportError.
    """

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.created: List[Run] = []
        self.updated: List[Tuple[UUID, RunUpdate]] = []

    @property
    def call_count(self) -> int:
        return len(self.created) + len(self.updated)

    async def create_run(self, run: Run) -> None:
        self.created.append(run.model_copy(deep=True))
        if self.fail:
            raise TransportError("HTTP 503: collector unavailable", status_code=503, body="collector unavailable")

    async def update_run(self, run_id: UUID, update: RunUpdate) -> None:
        self.updated.append((run_id, update.model_copy(deep=True)))
        if self.fail:
            raise TransportError("HTTP 503: collector unavailable", status_code=503, body="collector unavailable")

    def update_for(self, run_id: UUID) -> Optional[RunUpdate]:
        for recorded_id, update in self.updated:
            if recorded_id == run_id:
                return update
        return None


def build_collector_app(api_key: Optional[str] = None) -> FastAPI:
    """
    In-memory collector.

    Stored runs are in app.state.runs (id -> merged payload); request
    headers in app.state.requests.
    """
    app = FastAPI(title="runtrace-collector")
    app.state.runs = {}
    app.state.requests = []

    def _accept(request: Request) -> None:
        app.state.requests.append({
            "method": request.method,
            "path": request.url.path,
            "headers": dict(request.headers),
        })
        if api_key is not None and request.headers.get("x-api-key") != api_key:
            raise HTTPException(status_code=401, detail="invalid api key")

    @app.post("/runs", status_code=202)
    async def create_run(request: Request):
        _accept(request)
        payload = await request.json()
        app.state.runs[payload["id"]] = payload
        return {"id": payload["id"]}

    @app.patch("/runs/{run_id}")
    async def update_run(run_id: str, request: Request):
        _accept(request)
        if run_id not in app.state.runs:
            raise HTTPException(status_code=404, detail="run not found")
        app.state.runs[run_id].update(await request.json())
        return {"id": run_id}

    @app.get("/runs")
    async def list_runs():
        return sorted(app.state.runs.values(), key=lambda r: r.get("dotted_order", ""))

    return app
