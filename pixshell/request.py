"""Read shell requests from JSON.

A request names the base specification, the overlay, and any
specifications they share::

    {
      "specs": {
        "hello": {"name": "hello", "nativeBuildInputs": ["gcc"]},
        "tools": {"nativeBuildInputs": ["hello", "jq"]}
      },
      "base": "hello",
      "overlay": {"inputsFrom": ["hello", "tools"], "packages": ["ripgrep"]}
    }

A string naming a ``specs`` entry, used as a dependency or an
``inputsFrom`` source, resolves to the one shared Specification object.
mkShell compares by identity, so this is what lets ``tools`` depend on
``hello`` while ``hello`` is still dropped from the merged shell. Other
strings stay opaque references.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pixshell.spec import DEPENDENCY_FIELDS, Specification

logger = logging.getLogger(__name__)

_REFERENCE_ATTRS = frozenset({"packages", *DEPENDENCY_FIELDS})
_STRING_ATTRS = frozenset({"name", "shellHook"})


class RequestError(ValueError):
    pass


class _Resolver:
    """Turns request JSON into Specifications, one object per named spec."""

    def __init__(self, table: dict[str, Any]):
        self.table = table
        self.resolved: dict[str, Specification] = {}
        self.pending: set[str] = set()

    def named(self, name: str, where: str) -> Specification:
        if name in self.resolved:
            return self.resolved[name]
        if name not in self.table:
            raise RequestError(f"{where}: unknown specification {name!r}")
        if name in self.pending:
            raise RequestError(f"{where}: specification {name!r} refers to itself")
        self.pending.add(name)
        try:
            spec = self.build(self.table[name], f"specs.{name}")
        finally:
            self.pending.discard(name)
        logger.debug("resolved specification %r", name)
        self.resolved[name] = spec
        return spec

    def build(self, attrs: Any, where: str) -> Specification:
        if not isinstance(attrs, dict):
            raise RequestError(
                f"{where}: expected an object, got {type(attrs).__name__}"
            )
        converted = {}
        for key, value in attrs.items():
            if key == "inputsFrom":
                converted[key] = [
                    self.source(v, f"{where}.inputsFrom")
                    for v in _as_list(value, f"{where}.inputsFrom")
                ]
            elif key in _STRING_ATTRS:
                if value is not None and not isinstance(value, str):
                    raise RequestError(
                        f"{where}.{key}: expected a string, got {type(value).__name__}"
                    )
                converted[key] = value
            elif key in _REFERENCE_ATTRS:
                converted[key] = [
                    self.reference(v, f"{where}.{key}")
                    for v in _as_list(value, f"{where}.{key}")
                ]
            else:
                converted[key] = value
        return Specification.of(converted)

    def source(self, value: Any, where: str) -> Specification:
        if isinstance(value, str):
            return self.named(value, where)
        return self.build(value, where)

    def reference(self, value: Any, where: str) -> Any:
        if isinstance(value, str) and value in self.table:
            return self.named(value, where)
        if isinstance(value, dict):
            return self.build(value, where)
        if isinstance(value, list):
            return [self.reference(v, where) for v in value]
        return value


def _as_list(value: Any, where: str) -> list[Any]:
    if not isinstance(value, list):
        raise RequestError(f"{where}: expected a list, got {type(value).__name__}")
    return value


def load_request(data: Any) -> tuple[Specification, Specification]:
    """Turn a decoded request into ``(base, overlay)``."""
    if not isinstance(data, dict):
        raise RequestError(f"request: expected an object, got {type(data).__name__}")
    unknown = data.keys() - {"specs", "base", "overlay"}
    if unknown:
        raise RequestError(f"request: unknown keys {sorted(unknown)}")

    table = data.get("specs", {})
    if not isinstance(table, dict):
        raise RequestError(f"specs: expected an object, got {type(table).__name__}")
    resolver = _Resolver(table)

    base = data.get("base", {})
    if isinstance(base, str):
        base = resolver.named(base, "base")
    else:
        base = resolver.build(base, "base")
    overlay = resolver.build(data.get("overlay", {}), "overlay")
    return base, overlay


def read_request(path: str) -> tuple[Specification, Specification]:
    """Read and load a JSON request file."""
    with open(path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except UnicodeDecodeError as e:
            raise RequestError(f"{path}: not UTF-8: {e}") from e
        except json.JSONDecodeError as e:
            raise RequestError(f"{path}: invalid JSON: {e}") from e
    return load_request(data)
