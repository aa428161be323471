# ABOUTME: Shared Click options and helpers for booknote CLI commands.
# ABOUTME: Provides --config, settings loading, and reading a record from a JSON file.

import json
import sys
from pathlib import Path
from typing import IO, Any

import click
from rich.console import Console

from booknote.config import DEFAULT_CONFIG_PATH, ConfigError, Settings, load_settings
from booknote.metadata.types import Book

config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help=f"Path to settings file (default: ./booknote.toml or {DEFAULT_CONFIG_PATH})",
)

record_argument = click.argument("record_file", type=click.File("r", encoding="utf-8"))


def settings_or_exit(console: Console, config_path: Path | None) -> Settings:
    try:
        return load_settings(config_path)
    except ConfigError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        sys.exit(1)


def read_record(console: Console, handle: IO[str]) -> Book:
    """Read a camelCase record from a JSON object; exits on invalid input."""
    try:
        data: Any = json.load(handle)
    except json.JSONDecodeError as exc:
        console.print(f"[red]Invalid JSON record:[/red] {exc}")
        sys.exit(1)
    if not isinstance(data, dict):
        console.print("[red]Invalid JSON record:[/red] expected an object")
        sys.exit(1)
    return Book.from_record(data)
