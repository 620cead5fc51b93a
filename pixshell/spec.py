"""Build specifications — the attribute sets handed to mkDerivation.

A Specification is the Python counterpart of the argument set a Nix
package passes to ``stdenv.mkDerivation``::

    hello = Specification(
        name="hello",
        native_build_inputs=[gcc, gnumake],
        extra={"doCheck": True},
    )

The attributes mkShell cares about are dataclass fields; everything else
lives in ``extra`` under its Nix name. ``Specification.of()``, ``get()`` and
``to_dict()`` all speak Nix names (``nativeBuildInputs``, ``shellHook``)
so a spec can be built from, or turned back into, a plain attribute set.

Specifications compare by identity, not by value. Two specs with the same
fields are still two different dependencies, just like two derivations
that happen to be written the same way in two places.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

# The four dependency lists mkShell merges, in stdenv order.
DEPENDENCY_FIELDS = (
    "buildInputs",
    "nativeBuildInputs",
    "propagatedBuildInputs",
    "propagatedNativeBuildInputs",
)

# Overlay attributes that mkShell consumes itself instead of passing through.
RESERVED_FIELDS = frozenset({
    "name",
    "packages",
    "inputsFrom",
    *DEPENDENCY_FIELDS,
    "shellHook",
})

# Nix attribute name → dataclass field name
_ATTRS = {
    "name": "name",
    "packages": "packages",
    "inputsFrom": "inputs_from",
    "buildInputs": "build_inputs",
    "nativeBuildInputs": "native_build_inputs",
    "propagatedBuildInputs": "propagated_build_inputs",
    "propagatedNativeBuildInputs": "propagated_native_build_inputs",
    "shellHook": "shell_hook",
    "src": "src",
    "phases": "phases",
}

_SEQUENCE_ATTRS = ("packages", "inputsFrom", *DEPENDENCY_FIELDS)


@dataclass(frozen=True, eq=False)
class Specification:
    """An immutable build description.

    Immutability is shallow: fields cannot be reassigned and ``extra`` is a
    read-only view of a copy, but values inside ``extra`` (a ``meta`` dict,
    say) are the caller's objects and are shared, not copied.

    Sequence fields accept any iterable and are stored as tuples.
    ``phases`` stays ``None`` unless given, meaning "stdenv's default
    phases".
    """

    name: str | None = None
    packages: tuple[Any, ...] = ()
    inputs_from: tuple[Specification, ...] = ()
    build_inputs: tuple[Any, ...] = ()
    native_build_inputs: tuple[Any, ...] = ()
    propagated_build_inputs: tuple[Any, ...] = ()
    propagated_native_build_inputs: tuple[Any, ...] = ()
    shell_hook: str | None = None
    src: Any = None
    phases: tuple[str, ...] | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for attr in _SEQUENCE_ATTRS:
            name = _ATTRS[attr]
            object.__setattr__(self, name, tuple(getattr(self, name)))
        if self.phases is not None:
            object.__setattr__(self, "phases", tuple(self.phases))
        clash = _ATTRS.keys() & self.extra.keys()
        if clash:
            raise ValueError(
                f"extra attributes {sorted(clash)} shadow specification fields"
            )
        object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))

    @classmethod
    def of(cls, attrs: Mapping[str, Any] | None = None, **kw: Any) -> Specification:
        """Build a Specification from a Nix-style attribute set."""
        attrs = {**(attrs or {}), **kw}
        fields = {}
        extra = {}
        for key, value in attrs.items():
            if key in _ATTRS:
                fields[_ATTRS[key]] = value
            else:
                extra[key] = value
        return cls(**fields, extra=extra)

    def get(self, attr: str, default: Any = None) -> Any:
        """Look up an attribute by its Nix name."""
        if attr in _ATTRS:
            value = getattr(self, _ATTRS[attr])
            return default if value is None else value
        return self.extra.get(attr, default)

    def to_dict(self) -> dict[str, Any]:
        """Return the attribute set keyed by Nix names.

        Unset optional fields (``None``) are left out; sequence fields are
        always present, as lists.
        """
        attrs: dict[str, Any] = {}
        for attr, name in _ATTRS.items():
            value = getattr(self, name)
            if value is None:
                continue
            attrs[attr] = list(value) if isinstance(value, tuple) else value
        attrs.update(self.extra)
        return attrs

    def override(self, attrs: Mapping[str, Any] | None = None, **kw: Any) -> Specification:
        """Re-derive with changed attributes. Like drv.override in Nix."""
        return Specification.of({**self.to_dict(), **(attrs or {}), **kw})

    def dev_shell(self, overlay: Mapping[str, Any] | None = None, **kw: Any) -> Specification:
        """Derive a development shell from this specification."""
        from pixshell.mk_shell import mk_shell

        return mk_shell(self, {**(overlay or {}), **kw})

    def __str__(self) -> str:
        return self.name or ""
