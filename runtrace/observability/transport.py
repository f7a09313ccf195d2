"""
Run Transport Interface

Abstract destination for run create/update calls.
Storage-agnostic - implementations can send over HTTP, log, record, etc.

DESIGN RULES:
- Two calls only: create (POST) and update (PATCH)
- Failures raise TransportError; callers decide whether to swallow
- Implementations hold no per-run state
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict
from uuid import UUID

from runtrace.schemas.run import Run, RunUpdate


logger = logging.getLogger(__name__)


class RunTransport(ABC):
    """
    Abstract base for run delivery.

    Implementations:
    - HttpRunClient (collector API)
    - LoggingRunTransport (local debugging)
    - RecordingTransport (tests, see runtrace.testing)
    """

    @abstractmethod
    async def create_run(self, run: Run) -> None:
        """
        Send a newly started run.

        Raises:
            TransportError: if delivery failed
        """

    @abstractmethod
    async def update_run(self, run_id: UUID, update: RunUpdate) -> None:
        """
        Send the terminal update for an existing run.

        Raises:
            TransportError: if delivery failed
        """

    async def aclose(self) -> None:
        """Release any held connections."""


class LoggingRunTransport(RunTransport):
    """
    Transport that writes payloads as JSON lines to a logger.

    Useful for log aggregation systems and local debugging.
    """

    def __init__(self, log: logging.Logger = logger, level: int = logging.INFO):
        self._log = log
        self._level = level

    async def create_run(self, run: Run) -> None:
        self._emit("create", run.to_create_payload())

    async def update_run(self, run_id: UUID, update: RunUpdate) -> None:
        payload = update.to_payload()
        payload["id"] = str(run_id)
        self._emit("update", payload)

    def _emit(self, action: str, payload: Dict[str, Any]) -> None:
        self._log.log(self._level, json.dumps({"action": action, "run": payload}, sort_keys=True))
