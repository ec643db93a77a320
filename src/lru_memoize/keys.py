"""Deterministic cache keys derived from call arguments.

Arguments are first converted into a tagged canonical form, a nested
structure of ``[tag, payload]`` lists built only from JSON primitives, and
then hashed with sha256. Tagging keeps values that compare equal across
types (``1``, ``1.0``, ``True``) or look alike (``[1]`` vs ``(1,)``) on
distinct keys.
"""

from __future__ import annotations

import base64
import dataclasses
import hashlib
import json
from collections.abc import Mapping, Sequence
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from fractions import Fraction
from pathlib import PurePath
from typing import Any
from uuid import UUID

import numpy as np
from pydantic import BaseModel

from lru_memoize.errors import UnencodableArgumentError

_KEY_VERSION = "v1"


def _type_name(value: object) -> str:
    cls = type(value)
    return f"{cls.__module__}.{cls.__qualname__}"


def _dump(canonical: object) -> str:
    return json.dumps(canonical, sort_keys=True, separators=(",", ":"))


def _b64(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def _encode_float(value: float) -> str:
    # -0.0 == 0.0, so both must land on the same key
    if value == 0.0:
        value = 0.0
    return repr(value)


class _Canonicalizer:
    """Walk one argument tree, tracking open containers to reject cycles."""

    def __init__(self) -> None:
        self._open: set[int] = set()

    def encode(self, value: Any, path: str) -> list[Any]:
        if value is None:
            return ["none", None]
        if isinstance(value, bool):
            return ["bool", value]
        if isinstance(value, Enum):
            return ["enum", _type_name(value), value.name]
        if isinstance(value, (np.ndarray, np.generic)):
            return self._encode_numpy(value, path)
        if isinstance(value, int):
            return ["int", value]
        if isinstance(value, float):
            return ["float", _encode_float(value)]
        if isinstance(value, complex):
            return ["complex", _encode_float(value.real), _encode_float(value.imag)]
        if isinstance(value, str):
            return ["str", value]
        if isinstance(value, (bytes, bytearray)):
            return ["bytes", _b64(bytes(value))]
        if isinstance(value, Decimal):
            return ["decimal", str(value)]
        if isinstance(value, Fraction):
            return ["fraction", value.numerator, value.denominator]
        if isinstance(value, datetime):
            return ["datetime", value.isoformat()]
        if isinstance(value, date):
            return ["date", value.isoformat()]
        if isinstance(value, time):
            return ["time", value.isoformat()]
        if isinstance(value, timedelta):
            return ["timedelta", value.days, value.seconds, value.microseconds]
        if isinstance(value, UUID):
            return ["uuid", str(value)]
        if isinstance(value, PurePath):
            return ["path", _type_name(value), value.as_posix()]
        if callable(value):
            raise UnencodableArgumentError(path, f"callable {_type_name(value)} has no stable key")
        return self._encode_container(value, path)

    def _encode_container(self, value: Any, path: str) -> list[Any]:
        marker = id(value)
        if marker in self._open:
            raise UnencodableArgumentError(path, "cyclic reference")
        self._open.add(marker)
        try:
            return self._encode_structured(value, path)
        finally:
            self._open.discard(marker)

    def _encode_structured(self, value: Any, path: str) -> list[Any]:
        if isinstance(value, BaseModel):
            fields = {name: getattr(value, name) for name in type(value).model_fields}
            fields.update(value.model_extra or {})
            return ["model", _type_name(value), self._encode_items(fields, path, attr=True)]
        if dataclasses.is_dataclass(value):
            fields = {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
            return ["dataclass", _type_name(value), self._encode_items(fields, path, attr=True)]
        if isinstance(value, Mapping):
            return ["dict", self._encode_items(value, path)]
        if isinstance(value, (set, frozenset)):
            members = [self.encode(item, f"{path}{{}}") for item in value]
            members.sort(key=_dump)
            return ["set", members]
        if isinstance(value, tuple):
            return ["tuple", [self.encode(item, f"{path}[{i}]") for i, item in enumerate(value)]]
        if isinstance(value, list):
            return ["list", [self.encode(item, f"{path}[{i}]") for i, item in enumerate(value)]]
        if hasattr(value, "__dict__"):
            return ["object", _type_name(value), self._encode_items(vars(value), path, attr=True)]
        raise UnencodableArgumentError(path, f"unsupported type {_type_name(value)}")

    def _encode_items(self, items: Mapping[Any, Any], path: str, attr: bool = False) -> list[Any]:
        pairs = []
        for raw_key, raw_value in items.items():
            child = f"{path}.{raw_key}" if attr else f"{path}[{raw_key!r}]"
            pairs.append([self.encode(raw_key, child), self.encode(raw_value, child)])
        pairs.sort(key=lambda pair: _dump(pair[0]))
        return pairs

    def _encode_numpy(self, value: np.ndarray | np.generic, path: str) -> list[Any]:
        if value.dtype.hasobject:
            # object buffers hold pointers, so walk the Python values instead
            return ["ndarray-object", list(value.shape), self.encode(value.tolist(), path)]
        # equal values in either byte order share a key
        native = value.dtype.newbyteorder("=")
        if isinstance(value, np.generic):
            return ["npscalar", native.str, _b64(value.astype(native).tobytes())]
        raw = np.ascontiguousarray(value, dtype=native).tobytes()
        return ["ndarray", native.str, list(value.shape), _b64(raw)]


def canonicalize(args: Sequence[Any], kwargs: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Return the JSON-ready canonical form of one call's arguments."""
    walker = _Canonicalizer()
    encoded_args = [walker.encode(value, f"args[{i}]") for i, value in enumerate(args)]
    encoded_kwargs = [
        [name, walker.encode(value, f"kwargs[{name!r}]")]
        for name, value in sorted((kwargs or {}).items())
    ]
    return {"version": _KEY_VERSION, "args": encoded_args, "kwargs": encoded_kwargs}


def encode_key(args: Sequence[Any], kwargs: Mapping[str, Any] | None = None) -> str:
    """Compute a deterministic sha256 key for positional and keyword arguments.

    Raises:
        UnencodableArgumentError: an argument is cyclic, callable, or of a type
            without a deterministic encoding.
    """
    encoded = _dump(canonicalize(args, kwargs))
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()
