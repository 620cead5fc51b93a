"""pixshell — development shells derived from package specifications.

    from pixshell import Specification, mk_shell

    hello = Specification(name="hello", native_build_inputs=["gcc"])
    shell = mk_shell(hello, {"packages": ["gdb"]})
    shell.name                 # "hello-dev-shell"
    shell.native_build_inputs  # ("gdb", "gcc")
"""

from pixshell.env import BUILD_PHASE, shell_env, to_env_value
from pixshell.mk_shell import mk_shell
from pixshell.request import RequestError, load_request, read_request
from pixshell.spec import DEPENDENCY_FIELDS, RESERVED_FIELDS, Specification

__all__ = [
    "Specification", "DEPENDENCY_FIELDS", "RESERVED_FIELDS",
    "mk_shell",
    "shell_env", "to_env_value", "BUILD_PHASE",
    "load_request", "read_request", "RequestError",
]
