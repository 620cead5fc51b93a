"""Python equivalent of pkgs.mkShell, extended to start from a package.

Like nixpkgs/pkgs/build-support/mkshell/default.nix, but with a base
specification whose dependencies the shell inherits::

    shell = mk_shell(my_package, {
        "packages": [ripgrep],
        "inputsFrom": [other_package],
        "shellHook": "export RUST_BACKTRACE=1",
    })

Source (nixpkgs)::

    mergeInputs = name:
      (attrs.${name} or [ ])
      ++ (lib.subtractLists inputsFrom (lib.flatten (lib.catAttrs name inputsFrom)));

    stdenv.mkDerivation ({
      inherit name;
      buildInputs = mergeInputs "buildInputs";
      nativeBuildInputs = packages ++ (mergeInputs "nativeBuildInputs");
      ...
      shellHook = lib.concatStringsSep "\\n" (lib.catAttrs "shellHook"
        (lib.reverseList inputsFrom ++ [ attrs ]));
      phases = [ "buildPhase" ];
      preferLocalBuild = true;
    } // rest)

The result is a new Specification that only records an environment.
Nothing here builds, fetches or hashes anything.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from pixshell.env import BUILD_PHASE
from pixshell.spec import DEPENDENCY_FIELDS, RESERVED_FIELDS, Specification

logger = logging.getLogger(__name__)

DEFAULT_NAME = "nix-shell"
DEV_SHELL_SUFFIX = "-dev-shell"

_EMPTY = Specification()


def _coerce(spec: Specification | Mapping[str, Any] | None) -> Specification:
    if spec is None:
        return _EMPTY
    if isinstance(spec, Specification):
        return spec
    return Specification.of(spec)


def _cat_attr(source: Any, attr: str) -> Any:
    """Like lib.catAttrs for one element: None when source lacks attr."""
    if isinstance(source, (Specification, Mapping)):
        return source.get(attr)
    return None


def _flatten(items: Iterable[Any]) -> list[Any]:
    """Like lib.flatten: splice nested lists and tuples, recursively."""
    flat = []
    for item in items:
        if isinstance(item, (list, tuple)):
            flat.extend(_flatten(item))
        else:
            flat.append(item)
    return flat


def _is_source(dep: Any, inputs_from: Sequence[Any]) -> bool:
    # Identity, never ==: structurally equal deps are distinct entries.
    return any(dep is source for source in inputs_from)


def resolve_name(base: Specification, overlay: Specification) -> str:
    """Pick the shell name: overlay's, then "<base>-dev-shell", then "nix-shell"."""
    if overlay.name is not None:
        return overlay.name
    if base.name:
        return base.name + DEV_SHELL_SUFFIX
    return DEFAULT_NAME


def merge_inputs(attr: str, base: Specification, overlay: Specification) -> tuple[Any, ...]:
    """Merge one dependency list: base ++ overlay ++ what inputsFrom brings.

    Contributions from ``overlay.inputs_from`` are flattened in source order.
    Any entry that is itself one of the sources is dropped from the whole
    list, wherever it came from.
    """
    inputs_from = overlay.inputs_from
    contributed = _flatten(
        value for value in (_cat_attr(s, attr) for s in inputs_from)
        if value is not None
    )
    merged = (*base.get(attr, ()), *overlay.get(attr, ()), *contributed)
    return tuple(dep for dep in merged if not _is_source(dep, inputs_from))


def concat_shell_hooks(inputs_from: Sequence[Any], overlay: Specification) -> str:
    """Join shell hooks, later inputsFrom sources first, the overlay's last."""
    hooks = [_cat_attr(s, "shellHook") for s in reversed(inputs_from)]
    hooks.append(overlay.shell_hook)
    return "\n".join(hook for hook in hooks if hook)


def mk_shell(
    base: Specification | Mapping[str, Any] | None = None,
    overlay: Specification | Mapping[str, Any] | None = None,
) -> Specification:
    """Derive a development shell specification.

    Args:
        base:    The package specification the shell starts from. May be
                 empty or None.
        overlay: User attributes: ``name``, ``packages``, ``inputsFrom``,
                 the four dependency lists, ``shellHook``, and anything
                 else, which is passed through and overrides ``base``.

    The result never carries a ``src``, always has the single phase
    ``buildPhase`` running ``BUILD_PHASE``, and has ``packages`` and
    ``inputsFrom`` folded into its dependency lists.
    """
    base = _coerce(base)
    overlay = _coerce(overlay)

    rest = {
        attr: value for attr, value in overlay.to_dict().items()
        if attr not in RESERVED_FIELDS
    }
    attrs = {"preferLocalBuild": True, **base.extra, **rest}
    # A shell never unpacks sources or runs stdenv's phases.
    attrs.update(src=None, phases=["buildPhase"], buildPhase=BUILD_PHASE)

    attrs["name"] = resolve_name(base, overlay)
    for attr in DEPENDENCY_FIELDS:
        attrs[attr] = merge_inputs(attr, base, overlay)
    packages = tuple(
        dep for dep in overlay.packages if not _is_source(dep, overlay.inputs_from)
    )
    attrs["nativeBuildInputs"] = (*packages, *attrs["nativeBuildInputs"])
    attrs["shellHook"] = concat_shell_hooks(overlay.inputs_from, overlay)

    logger.debug(
        "mk_shell %s: %d inputsFrom source(s), %d passthrough attribute(s)",
        attrs["name"], len(overlay.inputs_from), len(rest),
    )
    return Specification.of(attrs)
