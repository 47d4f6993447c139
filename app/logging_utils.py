"""
Structured log lines for order import and pending order loads.
"""

from __future__ import annotations

import json
import logging
import time
from contextlib import contextmanager
from typing import Any, Iterator


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON, skipping the encode when
    the level is disabled.
    """

    if not logger.isEnabledFor(level):
        return
    payload = {"event": event, **fields}
    logger.log(level, json.dumps(payload, default=str, sort_keys=True))


@contextmanager
def timed_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> Iterator[dict[str, Any]]:
    """
    Log `event` once the block exits, with `duration_ms` and any fields the
    block adds to the yielded dict. Nothing is logged if the block raises.
    """

    collected: dict[str, Any] = dict(fields)
    started = time.monotonic()
    yield collected
    collected["duration_ms"] = round((time.monotonic() - started) * 1000, 1)
    log_event(logger, level, event, **collected)
