"""Loading of JSON input documents."""

from __future__ import annotations

import json
import logging
import sys

import typer


logger = logging.getLogger("jqlite")


def read_document_text(filepath: str | None) -> str:
    """Read raw document text from a file, or stdin when no file is given.

    Raises:
        typer.BadParameter: If file cannot be read
    """
    if filepath is None:
        return sys.stdin.read()

    try:
        with open(filepath, encoding="utf-8") as f:
            return f.read()
    except FileNotFoundError as err:
        raise typer.BadParameter(f"Input file '{filepath}' not found") from err
    except PermissionError as err:
        raise typer.BadParameter(f"Permission denied for '{filepath}'") from err
    except IsADirectoryError as err:
        raise typer.BadParameter(f"Input path '{filepath}' is a directory") from err
    except UnicodeDecodeError as err:
        raise typer.BadParameter(f"Input file '{filepath}' is not valid UTF-8") from err


def load_document(filepath: str | None) -> object:
    """Read and decode one JSON document.

    Args:
        filepath: Path to JSON file, or None for stdin

    Returns:
        Decoded JSON value

    Raises:
        typer.BadParameter: If input cannot be read or JSON is invalid
    """
    source = "stdin" if filepath is None else filepath
    text = read_document_text(filepath)
    logger.info("Processing %s...", source)

    try:
        return json.loads(text)
    except json.JSONDecodeError as err:
        raise typer.BadParameter(f"Invalid JSON in '{source}': {err}") from err
