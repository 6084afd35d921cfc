"""Timed audit logging for account security operations.

Every public password operation runs inside :func:`audited_operation`. The
block measures wall-clock duration and, when the wrapped code raises, writes
one failure entry with the error message before re-raising. Success entries
are written by the caller through :meth:`AuditContext.succeed` so that each
operation can attach the fields that only it knows (for example whether the
submitted email matched an account).
"""

import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, Optional

import structlog

from radio_auth.core.exceptions import RadioAuthError


class AuditContext:
    """Mutable context shared between an operation and its audit block."""

    def __init__(self, logger: structlog.stdlib.BoundLogger, operation: str, **fields: Any):
        self._logger = logger
        self.operation = operation
        self.fields: Dict[str, Any] = dict(fields)
        self._started = time.perf_counter()

    def bind(self, **fields: Any) -> None:
        """Attach fields learned mid-operation (account id, email)."""
        self.fields.update(fields)

    @property
    def duration_ms(self) -> int:
        return int((time.perf_counter() - self._started) * 1000)

    def succeed(self, event: str, **fields: Any) -> None:
        self._logger.info(
            event,
            operation=self.operation,
            outcome="success",
            timestamp=datetime.now(timezone.utc).isoformat(),
            duration_ms=self.duration_ms,
            **{**self.fields, **fields},
        )

    def fail(self, event: str, error: BaseException) -> None:
        fields = dict(self.fields)
        if isinstance(error, RadioAuthError):
            log = self._logger.warning
        else:
            log = self._logger.error
            fields["exc_info"] = error
        log(
            event,
            operation=self.operation,
            outcome="failure",
            error=str(error),
            error_type=type(error).__name__,
            timestamp=datetime.now(timezone.utc).isoformat(),
            duration_ms=self.duration_ms,
            **fields,
        )


@asynccontextmanager
async def audited_operation(
    logger: structlog.stdlib.BoundLogger,
    operation: str,
    failure_event: Optional[str] = None,
    **fields: Any,
) -> AsyncIterator[AuditContext]:
    """Run a block as an audited operation, logging and re-raising any failure."""
    audit = AuditContext(logger, operation, **fields)
    try:
        yield audit
    except Exception as e:
        audit.fail(failure_event or f"{operation} failed", e)
        raise
