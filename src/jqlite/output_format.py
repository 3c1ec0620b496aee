"""Output formatting and rendering of query results."""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Iterable
from dataclasses import dataclass

from rich.console import Console
from rich.syntax import Syntax


logger = logging.getLogger("jqlite")

DEFAULT_OUTPUT_THEME = "github-dark"


class OutputFormatError(RuntimeError):
    """Raised when output formatting fails."""


@dataclass(frozen=True)
class OutputOptions:
    """Serialization options for result values."""

    pretty: bool = False
    compact: bool = False
    raw: bool = False


@dataclass(frozen=True)
class OutputOperation:
    """One prepared output operation."""

    kind: str
    text: str | None = None
    renderable: object | None = None


@dataclass(frozen=True)
class PreparedOutput:
    """Prepared output operations ready for console rendering."""

    operations: tuple[OutputOperation, ...]


def should_use_color(color_flag: bool | None) -> bool:
    """Determine if color should be used based on flag and TTY detection.

    Args:
        color_flag: Explicit color preference (True/False) or None for auto-detect

    Returns:
        True if colors should be used, False otherwise
    """
    if color_flag is None:
        return sys.stdout.isatty()
    return color_flag


def build_console(color_enabled: bool) -> Console:
    """Build the console used for result output."""
    return Console(
        force_terminal=color_enabled,
        no_color=not color_enabled,
        highlight=False,
        soft_wrap=True,
    )


def format_value(value: object, options: OutputOptions) -> str:
    """Serialize one result value.

    Compact output wins over pretty output when both are requested.
    """
    if options.raw and isinstance(value, str):
        return value

    try:
        if options.pretty and not options.compact:
            return json.dumps(value, indent=2, ensure_ascii=False)
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise OutputFormatError(f"Cannot serialize result: {exc}") from exc


def _normalize_syntax_theme(out_theme: str) -> str:
    """Return a valid theme name for syntax rendering."""
    normalized_theme = out_theme.strip()
    if normalized_theme:
        return normalized_theme
    return DEFAULT_OUTPUT_THEME


def prepare_output(
    values: Iterable[object],
    options: OutputOptions,
    color_enabled: bool,
    out_theme: str = DEFAULT_OUTPUT_THEME,
) -> PreparedOutput:
    """Prepare result values with JSON highlighting when color is enabled."""
    operations: list[OutputOperation] = []
    for value in values:
        text = format_value(value, options)
        if color_enabled and not (options.raw and isinstance(value, str)):
            operations.append(
                OutputOperation(
                    kind="console_print",
                    renderable=Syntax(
                        text,
                        "json",
                        theme=_normalize_syntax_theme(out_theme),
                        line_numbers=False,
                        word_wrap=True,
                        background_color="default",
                    ),
                )
            )
            continue
        operations.append(OutputOperation(kind="plain_write", text=text))
    return PreparedOutput(operations=tuple(operations))


def _write_plain_output(console: Console, text: str) -> None:
    """Write plain output directly to console stream."""
    console.file.write(f"{text}\n")
    console.file.flush()


def print_prepared_output(console: Console, prepared_output: PreparedOutput) -> None:
    """Print already prepared output operations."""
    for operation in prepared_output.operations:
        if operation.kind == "plain_write":
            if operation.text is not None:
                _write_plain_output(console, operation.text)
            continue
        if operation.renderable is not None:
            console.print(operation.renderable)
            continue
        console.print(operation.text if operation.text is not None else "", markup=False)
