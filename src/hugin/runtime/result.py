"""Explicit results for container runtime calls.

Runtime calls never decide control flow by raising. `attempt()` turns each
call into a CallResult; the caller branches on `ok` and logs/metrics are
recorded as a side effect.
"""

import logging
import time
from collections.abc import Awaitable
from typing import Generic, TypeVar

from pydantic import BaseModel

from hugin.errors import ErrorCode, HuginError
from hugin.logging_schema import LogEvent
from hugin.metrics import HUGIN_RUNTIME_CALL_DURATION, HUGIN_RUNTIME_CALL_ERRORS

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CallResult(BaseModel, Generic[T]):
    """Outcome of one runtime call.

    Attributes:
        operation: inspect, start, stop, kill or logs
        value: Call return value when ok
        error_code: HuginError code when the call failed
        error_message: Operator-facing failure description
    """

    operation: str
    value: T | None = None
    error_code: ErrorCode | None = None
    error_message: str = ""

    @property
    def ok(self) -> bool:
        return self.error_code is None


async def attempt(
    operation: str,
    call: Awaitable[T],
    *,
    container: str,
) -> CallResult[T]:
    """Run a runtime call and capture its result.

    Only HuginError is captured. Anything else is a programming error and
    propagates to the command dispatch boundary.
    """
    start = time.perf_counter()
    try:
        value = await call
    except HuginError as e:
        HUGIN_RUNTIME_CALL_ERRORS.labels(
            operation=operation, error_type=e.code.value.lower()
        ).inc()
        logger.warning(
            "Runtime call failed",
            extra={
                "event": LogEvent.RUNTIME_CALL_FAILED,
                "operation": operation,
                "container": container,
                "error_code": e.code.value,
                "error_message": e.message,
            },
        )
        return CallResult(operation=operation, error_code=e.code, error_message=e.message)
    finally:
        HUGIN_RUNTIME_CALL_DURATION.labels(operation=operation).observe(
            time.perf_counter() - start
        )
    return CallResult(operation=operation, value=value)
