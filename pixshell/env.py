"""Lower a Specification to the builder's environment.

Like make-derivation.nix handing its attribute set to
``builtins.derivation``: every attribute becomes an environment
variable, coerced to a string.

How builtins.derivation coerces values:
  - null → ""
  - true → "1", false → ""
  - lists → elements coerced and joined with single spaces
  - derivations → their output path (here: ``str()`` of the reference)
  - attribute sets → error, except ``passthru`` and ``meta`` which
    make-derivation removes before calling ``derivation``

Also holds the one build phase a dev shell runs. It does not build
anything: it dumps the exported environment into ``$out`` so the
result can be sourced later.
"""

from __future__ import annotations

import shlex
from collections.abc import Mapping, Sequence
from typing import Any

from pixshell.spec import Specification

# make-derivation attributes that are always present in the environment,
# empty unless the specification sets them.
SHELL_ENV_DEFAULTS = {
    "__structuredAttrs": "",
    "buildInputs": "",
    "cmakeFlags": "",
    "configureFlags": "",
    "depsBuildBuild": "",
    "depsBuildBuildPropagated": "",
    "depsBuildTarget": "",
    "depsBuildTargetPropagated": "",
    "depsHostHost": "",
    "depsHostHostPropagated": "",
    "depsTargetTarget": "",
    "depsTargetTargetPropagated": "",
    "doCheck": "",
    "doInstallCheck": "",
    "mesonFlags": "",
    "nativeBuildInputs": "",
    "outputs": "out",
    "patches": "",
    "propagatedBuildInputs": "",
    "propagatedNativeBuildInputs": "",
    "shellHook": "",
    "src": "",
    "strictDeps": "",
}

# Removed by make-derivation before the derivation is created, plus the
# mkShell-only attributes that never reach mkDerivation.
_NOT_IN_ENV = frozenset({"passthru", "meta", "packages", "inputsFrom"})

BANNER = (
    "------------------------------------------------------------",
    " WARNING: the existence of this path is not guaranteed.",
    " It is an internal implementation detail for pixshell.",
    "------------------------------------------------------------",
)


def build_phase(banner: Sequence[str] = BANNER) -> str:
    """Render the dev shell build phase for the given banner lines."""
    lines = ["{"]
    lines += [f"  echo {shlex.quote(line)};" for line in banner]
    lines += [
        "  echo;",
        "  # Record all build inputs as runtime dependencies",
        "  export;",
        '} >> "$out"',
    ]
    return "\n".join(lines) + "\n"


BUILD_PHASE = build_phase()


def to_env_value(value: Any) -> str:
    """Coerce one attribute value to its environment string."""
    if value is None or value is False:
        return ""
    if value is True:
        return "1"
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return " ".join(to_env_value(v) for v in value)
    if isinstance(value, Mapping):
        raise TypeError(f"cannot coerce an attribute set to a string: {value!r}")
    return str(value)


def shell_env(spec: Specification) -> dict[str, str]:
    """Return the environment variables a builder would see for spec."""
    env = dict(SHELL_ENV_DEFAULTS)
    for attr, value in spec.to_dict().items():
        if attr in _NOT_IN_ENV:
            continue
        env[attr] = to_env_value(value)
    return env
