"""Configuration handling for the jqlite CLI."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import typer


DEFAULT_CONFIG_NAME = ".jqlite.json"

COMMAND_OPTION_NAMES = {
    "color_flag",
    "compact",
    "max_visits",
    "out_theme",
    "pretty",
    "raw",
    "verbose",
}

DEST_TO_OPTION_NAME: dict[str, str] = {
    "color_flag": "--color/--no-color",
    "compact": "--compact",
    "max_visits": "--max-visits",
    "out_theme": "--out-theme",
    "pretty": "--pretty",
    "raw": "--raw",
    "verbose": "--verbose",
}

BOOL_OPTIONS: dict[str, str] = {
    "--compact": "compact",
    "--pretty": "pretty",
    "--raw": "raw",
    "--verbose": "verbose",
}

INT_OPTIONS: dict[str, tuple[str, int | None]] = {
    "--max-visits": ("max_visits", 0),
}

STR_OPTIONS: dict[str, str] = {
    "--out-theme": "out_theme",
}

COLOR_OPTIONS = {"--color", "--no-color"}


CONFIG_DEFAULTS: dict[str, object] = {}


logger = logging.getLogger("jqlite")


def load_config(filepath: str) -> tuple[dict[str, object], bool]:
    """Load config from JSON file.

    Args:
        filepath: Path to config file

    Returns:
        Tuple of (config dict, malformed flag)
    """
    try:
        with open(filepath, encoding="utf-8") as f:
            config = json.load(f)
    except FileNotFoundError:
        return ({}, False)
    except PermissionError:
        return ({}, True)
    except OSError:
        return ({}, True)
    except json.JSONDecodeError:
        return ({}, True)

    if not isinstance(config, dict):
        return ({}, True)

    return (config, False)


def parse_color_defaults(config: dict[str, object]) -> tuple[dict[str, object], bool]:
    """Parse color-related config defaults."""
    defaults: dict[str, object] = {}
    color_value = config.get("--color")
    no_color_value = config.get("--no-color")

    if "--color" in config and not isinstance(color_value, bool):
        return ({}, False)
    if "--no-color" in config and not isinstance(no_color_value, bool):
        return ({}, False)
    if color_value is True and no_color_value is True:
        return ({}, False)

    if color_value is True:
        defaults["color_flag"] = True
    if no_color_value is True:
        defaults["color_flag"] = False

    return (defaults, True)


def validate_int_option(value: object, min_value: int | None) -> int | None:
    """Validate integer option value."""
    if not isinstance(value, int) or isinstance(value, bool):
        return None
    if min_value is not None and value < min_value:
        return None
    return value


def validate_str_option(value: object) -> str | None:
    """Validate non-empty string option value."""
    if not isinstance(value, str) or not value.strip():
        return None
    return value


def apply_config_entry(key: str, value: object, defaults: dict[str, object]) -> bool:
    """Apply one config entry to defaults, returning whether it was valid."""
    if key in BOOL_OPTIONS:
        if not isinstance(value, bool):
            return False
        defaults[BOOL_OPTIONS[key]] = value
        return True

    if key in INT_OPTIONS:
        dest, min_value = INT_OPTIONS[key]
        int_value = validate_int_option(value, min_value)
        if int_value is None:
            return False
        defaults[dest] = int_value
        return True

    if key in STR_OPTIONS:
        str_value = validate_str_option(value)
        if str_value is None:
            return False
        defaults[STR_OPTIONS[key]] = str_value
        return True

    return key in COLOR_OPTIONS


def build_config_defaults(config: dict[str, object]) -> dict[str, object] | None:
    """Build command defaults from a config mapping, or None when malformed."""
    defaults, color_valid = parse_color_defaults(config)
    if not color_valid:
        return None

    for key, value in config.items():
        if not apply_config_entry(key, value, defaults):
            return None

    return {key: value for key, value in defaults.items() if key in COMMAND_OPTION_NAMES}


def parse_config_argument(argv: list[str]) -> str:
    """Parse only the --config argument from argv."""
    for idx, arg in enumerate(argv[1:], start=1):
        if arg == "--config" and idx + 1 < len(argv):
            return argv[idx + 1]
        if arg.startswith("--config="):
            return arg.split("=", 1)[1]
    return DEFAULT_CONFIG_NAME


def load_cli_config(argv: list[str]) -> dict[str, object]:
    """Load config defaults from the configured file path."""
    config_name = parse_config_argument(argv)
    config_path = Path(config_name)
    if not config_path.is_absolute():
        config_path = Path.cwd() / config_name
    config, load_error = load_config(str(config_path))

    if load_error:
        raise typer.BadParameter("Malformed config")

    defaults = build_config_defaults(config)
    if defaults is None:
        raise typer.BadParameter("Malformed config")

    return defaults


def _format_log_entry(name: str, value: object) -> str:
    """Format one name/value pair for logging."""
    return f"{name}={value!r}"


def log_applied_config_defaults(command_name: str) -> None:
    """Log config defaults loaded from config file."""
    if not logger.isEnabledFor(logging.INFO):
        return

    entries = [
        _format_log_entry(DEST_TO_OPTION_NAME[dest], value)
        for dest, value in sorted(CONFIG_DEFAULTS.items(), key=lambda item: item[0])
        if dest in DEST_TO_OPTION_NAME
    ]
    if entries:
        logger.info("Config defaults applied (%s): %s", command_name, ", ".join(entries))


def log_command_arguments(args: object, command_name: str) -> None:
    """Log all final argument values used to run a command."""
    if not logger.isEnabledFor(logging.INFO):
        return

    try:
        arg_items = vars(args).items()
    except TypeError:
        return

    entries = [
        _format_log_entry(arg_name, arg_value)
        for arg_name, arg_value in sorted(arg_items, key=lambda item: item[0])
    ]
    logger.info("Command arguments (%s): %s", command_name, ", ".join(entries))
