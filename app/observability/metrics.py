from __future__ import annotations

import logging
import os
from typing import Any, Callable, Set

from prometheus_client import Counter

_METRICS_LABEL_CARD_MAX = int(os.getenv("METRICS_LABEL_CARD_MAX", "") or "100")
_METRICS_LABEL_OVERFLOW = "__overflow__"

_seen_events: Set[str] = set()

_log = logging.getLogger(__name__)

ROUTE_DEFINITIONS = Counter(
    "route_definitions_total",
    "Route definition files seen while scanning the routes directory, by outcome",
    ["outcome"],
)

CLIENT_METRICS_EVENTS = Counter(
    "client_metrics_events_total",
    "Events reported by front-end clients through POST /metrics",
    ["event"],
)


def _best_effort(msg: str, fn: Callable[[], Any]) -> None:
    try:
        fn()
    except Exception as e:  # pragma: no cover
        # nosec B110 - metrics must never fail startup or a request
        _log.debug("%s: %s", msg, e)


def _safe_label(val: str, cache: Set[str]) -> str:
    if not val:
        return "unknown"
    if val in cache:
        return val
    if len(cache) < _METRICS_LABEL_CARD_MAX:
        cache.add(val)
        return val
    return _METRICS_LABEL_OVERFLOW


def inc_route_definition(outcome: str) -> None:
    _best_effort(
        "inc route_definitions_total",
        lambda: ROUTE_DEFINITIONS.labels(outcome=outcome).inc(),
    )


def inc_client_event(event: str) -> None:
    label = _safe_label(str(event), _seen_events)
    _best_effort(
        "inc client_metrics_events_total",
        lambda: CLIENT_METRICS_EVENTS.labels(event=label).inc(),
    )
