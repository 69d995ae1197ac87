# backend/utils/operations.py
import logging
from contextlib import asynccontextmanager
from typing import Dict, Optional

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class OperationState(BaseModel):
    pending: bool = False
    last_error: Optional[str] = None


class OperationTracker:
    """In-flight flag and last error message per named operation."""

    def __init__(self):
        self._states: Dict[str, OperationState] = {}

    def state(self, name: str) -> OperationState:
        return self._states.setdefault(name, OperationState())

    def snapshot(self) -> Dict[str, OperationState]:
        return {name: state.model_copy() for name, state in self._states.items()}

    @asynccontextmanager
    async def track(self, name: str):
        state = self.state(name)
        state.pending = True
        state.last_error = None
        try:
            yield state
        except Exception as e:
            state.last_error = getattr(e, "message", None) or str(e)
            logger.debug("Operation %s failed: %s", name, state.last_error)
            raise
        finally:
            state.pending = False
