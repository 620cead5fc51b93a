#!/usr/bin/env python3
"""pixshell — derive development shells from package specifications."""

import argparse
import json
import logging
import re
import shlex
import sys

from pixshell.env import shell_env
from pixshell.mk_shell import mk_shell
from pixshell.request import RequestError, read_request
from pixshell.spec import Specification

logger = logging.getLogger(__name__)

_SHELL_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _reference(obj):
    """json default: Specifications are shown by name, anything else by str()."""
    if isinstance(obj, Specification):
        return obj.name or "<anonymous>"
    return str(obj)


def _shell(args) -> Specification:
    base, overlay = read_request(args.request)
    shell = mk_shell(base, overlay)
    logger.debug("derived %s from %s", shell.name, args.request)
    return shell


def cmd_show(args):
    shell = _shell(args)
    json.dump(shell.to_dict(), sys.stdout, indent=2, default=_reference)
    print()


def cmd_env(args):
    shell = _shell(args)
    try:
        env = shell_env(shell)
    except TypeError as e:
        raise RequestError(f"{args.request}: {e}") from e
    if args.export:
        for key, value in env.items():
            if not _SHELL_NAME_RE.match(key):
                logger.warning("skipping %r: not a shell variable name", key)
                continue
            print(f"export {key}={shlex.quote(value)}")
    else:
        json.dump(env, sys.stdout, indent=2, sort_keys=True)
        print()


def cmd_hook(args):
    print(_shell(args).shell_hook)


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="pixshell", description="Derive development shells from package specifications",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    sub = parser.add_subparsers(dest="command")

    # show
    p = sub.add_parser("show", help="Show the derived shell specification as JSON")
    p.add_argument("request", help="JSON request file")
    p.set_defaults(func=cmd_show)

    # env
    p = sub.add_parser("env", help="Show the shell's builder environment")
    p.add_argument("request", help="JSON request file")
    p.add_argument("--export", action="store_true", help="Print export lines instead of JSON")
    p.set_defaults(func=cmd_env)

    # hook
    p = sub.add_parser("hook", help="Print the merged shellHook")
    p.add_argument("request", help="JSON request file")
    p.set_defaults(func=cmd_hook)

    args = parser.parse_args(argv)
    logging.basicConfig(
        format="%(levelname)s %(name)s: %(message)s",
        level=logging.DEBUG if args.verbose else logging.WARNING,
    )
    if not args.command:
        parser.print_help()
        sys.exit(1)
    try:
        args.func(args)
    except (RequestError, OSError) as e:
        print(f"pixshell: error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
