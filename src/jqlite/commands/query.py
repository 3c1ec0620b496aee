"""Query command running one expression over a JSON document."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

import click
import typer

from jqlite import config as config_module
from jqlite import logging_config
from jqlite.input_data import load_document
from jqlite.output_format import (
    DEFAULT_OUTPUT_THEME,
    OutputFormatError,
    OutputOptions,
    build_console,
    prepare_output,
    print_prepared_output,
    should_use_color,
)
from jqlite.query_language import (
    QueryLexError,
    QueryParseError,
    QueryRuntimeError,
    compile_expr,
    format_query_error,
    parse_query,
)


logger = logging.getLogger("jqlite")


@dataclass
class QueryArgs:
    """Arguments for the query command."""

    query: str
    file: str | None
    config: str
    pretty: bool
    compact: bool
    raw: bool
    color_flag: bool | None
    out_theme: str
    max_visits: int | None
    debug: bool
    verbose: bool


def _elapsed_ms(started: float) -> float:
    """Milliseconds elapsed since a perf counter reading."""
    return (time.perf_counter() - started) * 1000


def run_query(args: QueryArgs) -> None:
    """Run the query command."""
    color_enabled = should_use_color(args.color_flag)
    console = build_console(color_enabled)
    if args.max_visits is not None and args.max_visits < 0:
        raise typer.BadParameter("--max-visits must be non-negative")

    started = time.perf_counter()
    try:
        expr = parse_query(args.query)
    except (QueryLexError, QueryParseError) as exc:
        raise click.UsageError(format_query_error(args.query, exc)) from exc
    query_parse_ms = _elapsed_ms(started)
    if args.debug:
        logger.info("Query expression: %r", expr)

    started = time.perf_counter()
    document = load_document(args.file)
    json_parse_ms = _elapsed_ms(started)

    started = time.perf_counter()
    try:
        results = compile_expr(expr, args.max_visits)(document)
    except QueryRuntimeError as exc:
        raise click.UsageError(f"Error executing query: {exc}") from exc
    execute_ms = _elapsed_ms(started)

    started = time.perf_counter()
    options = OutputOptions(pretty=args.pretty, compact=args.compact, raw=args.raw)
    try:
        prepared_output = prepare_output(results, options, color_enabled, args.out_theme)
    except OutputFormatError as exc:
        raise click.UsageError(str(exc)) from exc
    print_prepared_output(console, prepared_output)
    output_ms = _elapsed_ms(started)

    logger.info(
        "Timings: query parse %.3f ms, JSON parse %.3f ms, execution %.3f ms, "
        "formatting %.3f ms, total %.3f ms",
        query_parse_ms,
        json_parse_ms,
        execute_ms,
        output_ms,
        query_parse_ms + json_parse_ms + execute_ms + output_ms,
    )


def register(app: typer.Typer) -> None:
    """Register the query command."""

    @app.command("query")
    def query_command(  # noqa: PLR0913
        query: str = typer.Argument(..., metavar="QUERY", help="jq-style query expression"),
        file: str | None = typer.Argument(
            None, metavar="FILE", help="JSON file to query (reads stdin when omitted)"
        ),
        config: str = typer.Option(
            config_module.DEFAULT_CONFIG_NAME,
            "--config",
            metavar="FILE",
            help="Config file name to load from current directory",
        ),
        pretty: bool = typer.Option(False, "--pretty", "-p", help="Pretty print the output"),
        compact: bool = typer.Option(
            False, "--compact", "-c", help="Compact output (no whitespace)"
        ),
        raw: bool = typer.Option(False, "--raw", "-r", help="Print strings without quotes"),
        color_flag: bool | None = typer.Option(
            None,
            "--color/--no-color",
            help="Force colored output",
        ),
        out_theme: str = typer.Option(
            DEFAULT_OUTPUT_THEME,
            "--out-theme",
            help="Syntax theme for highlighted output",
        ),
        max_visits: int | None = typer.Option(
            None,
            "--max-visits",
            metavar="N",
            help="Maximum number of values recursive descent may visit",
        ),
        debug: bool = typer.Option(False, "--debug", help="Log the parsed query expression"),
        verbose: bool = typer.Option(
            False, "--verbose", "-v", help="Enable verbose logging output"
        ),
    ) -> None:
        """Query a JSON document using jq-style expressions."""
        logging_config.configure_logging(verbose or debug)
        args = QueryArgs(
            query=query,
            file=file,
            config=config,
            pretty=pretty,
            compact=compact,
            raw=raw,
            color_flag=color_flag,
            out_theme=out_theme,
            max_visits=max_visits,
            debug=debug,
            verbose=verbose,
        )
        config_module.log_applied_config_defaults("query")
        config_module.log_command_arguments(args, "query")
        run_query(args)
