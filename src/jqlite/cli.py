#!/usr/bin/env python
"""CLI interface for jqlite - jq-style JSON queries."""

from __future__ import annotations

import sys

import typer

from jqlite import config
from jqlite.commands import query


app = typer.Typer(
    help="Query JSON documents with jq-style expressions.",
    no_args_is_help=True,
    add_completion=False,
)


query.register(app)


def main() -> None:
    """Main CLI entry point."""
    command = typer.main.get_command(app)
    try:
        defaults = config.load_cli_config(sys.argv)
    except typer.BadParameter as exc:
        exc.show()
        sys.exit(exc.exit_code)
    config.CONFIG_DEFAULTS.clear()
    config.CONFIG_DEFAULTS.update(defaults)

    command.main(
        args=sys.argv[1:],
        prog_name="jqlite",
        standalone_mode=True,
        default_map=defaults or None,
    )


if __name__ == "__main__":
    main()
