"""
Record Base Class
=================

Every farm entity is a plain dataclass. ``Record`` gives them a uniform
``to_dict()`` for API payloads and events and a tolerant ``from_dict()`` that
builds nested records, enums and timestamps from JSON-shaped input.

Unknown keys are ignored. Fields declared with ``metadata={"serialize": False}``
are kept out of ``to_dict()``.
"""

from __future__ import annotations

import types
from dataclasses import fields, is_dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Union, get_args, get_origin, get_type_hints

from app.domain.exceptions import ValidationError
from app.utils.time import coerce_datetime

_HINT_CACHE: Dict[type, Dict[str, Any]] = {}


def to_plain(value: Any) -> Any:
    """Render a value as JSON-compatible primitives."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if is_dataclass(value) and not isinstance(value, type):
        to_dict = getattr(value, "to_dict", None)
        if callable(to_dict):
            return to_dict()
    if isinstance(value, (list, tuple, set)):
        return [to_plain(v) for v in value]
    if isinstance(value, dict):
        return {str(to_plain(k)): to_plain(v) for k, v in value.items()}
    return value


def _hints(cls: type) -> Dict[str, Any]:
    hints = _HINT_CACHE.get(cls)
    if hints is None:
        hints = get_type_hints(cls)
        _HINT_CACHE[cls] = hints
    return hints


def _coerce(tp: Any, value: Any) -> Any:
    if value is None or tp is Any:
        return value

    origin = get_origin(tp)
    if origin in (Union, types.UnionType):
        args = [a for a in get_args(tp) if a is not type(None)]
        return _coerce(args[0], value) if len(args) == 1 else value
    if origin is list:
        args = get_args(tp)
        inner = args[0] if args else Any
        return [_coerce(inner, v) for v in value]
    if origin is dict:
        return dict(value)

    if not isinstance(tp, type):
        return value
    if tp is bool:
        return bool(value)
    if isinstance(value, tp):
        return value
    if issubclass(tp, Enum):
        return tp(value)
    if tp is datetime:
        parsed = coerce_datetime(value)
        if parsed is None:
            raise ValueError(f"Invalid datetime: {value!r}")
        return parsed
    if tp is date:
        if isinstance(value, datetime):
            return value.date()
        return date.fromisoformat(str(value)[:10])
    if tp in (int, float, str):
        return tp(value)
    if is_dataclass(tp) and isinstance(value, dict):
        return tp.from_dict(value)
    return value


class Record:
    """Mixin for entity dataclasses."""

    def to_dict(self) -> Dict[str, Any]:
        return {
            f.name: to_plain(getattr(self, f.name))
            for f in fields(self)
            if f.metadata.get("serialize", True)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None):
        data = data or {}
        hints = _hints(cls)
        kwargs: Dict[str, Any] = {}
        for f in fields(cls):
            if not f.init or f.name not in data:
                continue
            try:
                kwargs[f.name] = _coerce(hints[f.name], data[f.name])
            except (TypeError, ValueError) as exc:
                raise ValidationError(f"Invalid value for {f.name}: {exc}") from exc
        return cls(**kwargs)

    def apply_updates(self, updates: Dict[str, Any], *, protected: frozenset[str] = frozenset()) -> list[str]:
        """Overwrite known, unprotected fields from ``updates``; return the names changed."""
        hints = _hints(type(self))
        changed = []
        for f in fields(self):
            if f.name in protected or f.name not in updates:
                continue
            try:
                setattr(self, f.name, _coerce(hints[f.name], updates[f.name]))
            except (TypeError, ValueError) as exc:
                raise ValidationError(f"Invalid value for {f.name}: {exc}") from exc
            changed.append(f.name)
        return changed
