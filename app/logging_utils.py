"""
Structured logging helpers for snapshot ingestion and publishing.

Every line is one compact JSON object whose first key is ``event``, so
log shippers can route on it without parsing the rest.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from demand.errors import RowRejection


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON.
    """

    if not logger.isEnabledFor(level):
        return
    payload = {"event": event}
    payload.update(sorted(fields.items()))
    logger.log(level, json.dumps(payload, default=str, separators=(",", ":")))


def log_rejection(logger: logging.Logger, rejection: RowRejection) -> None:
    """
    Log one dropped input row.

    Unknown categories are a data-quality signal (a new group label in a
    source export) and go out at WARNING; every other reason is DEBUG.
    """

    level = logging.WARNING if rejection.is_unknown_category else logging.DEBUG
    log_event(
        logger,
        level,
        "csv_row_rejected",
        file=rejection.source,
        row_number=rejection.row_number,
        reason=rejection.reason,
        message=rejection.message,
    )
