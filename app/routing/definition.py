# app/routing/definition.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Pattern, Tuple, Union

PathMatcher = Union[str, Pattern[str]]

_REQUIRED_FIELDS = ("method", "path", "process")


@dataclass(frozen=True)
class RouteDefinition:
    """
    One method + path + handler triple.

    ``path`` is either a Starlette path string ("/ver.json", "/items/{id}")
    or a compiled regular expression matched against the full request path.
    ``process`` receives the request and returns a response; it may be sync
    or async.
    """

    method: str
    path: PathMatcher
    process: Callable[..., Any]

    @classmethod
    def from_unit(cls, unit: Any) -> "RouteDefinition":
        if isinstance(unit, cls):
            return unit
        return cls(
            method=_field(unit, "method"),
            path=_field(unit, "path"),
            process=_field(unit, "process"),
        )


RouteCollection = Tuple[RouteDefinition, ...]


def _field(unit: Any, name: str) -> Any:
    if isinstance(unit, Mapping):
        return unit.get(name)
    return getattr(unit, name, None)


def missing_fields(unit: Any) -> List[str]:
    """Names of the required fields that are absent or falsy on ``unit``."""
    if unit is None:
        return list(_REQUIRED_FIELDS)
    try:
        return [name for name in _REQUIRED_FIELDS if not _field(unit, name)]
    except Exception:
        return list(_REQUIRED_FIELDS)


def is_valid_route(unit: Any) -> bool:
    """Return True when ``method``, ``path`` and ``process`` are all truthy.

    Accepts modules, plain objects and mappings. Never raises.
    """
    return not missing_fields(unit)
