# ABOUTME: Configuration loader for booknote.
# ABOUTME: Loads settings from booknote.toml with defaults when the file is absent.

import tomllib
from dataclasses import dataclass, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any

DEFAULT_CONFIG_PATH = Path.home() / ".booknote" / "booknote.toml"


class ConfigError(Exception):
    """Raised when configuration loading or validation fails."""


class FrontmatterKeyStyle(str, Enum):
    """Key casing of the generated default header."""

    CAMEL_CASE = "camelCase"
    SNAKE_CASE = "snakeCase"


class ServiceProvider(str, Enum):
    GOOGLE = "google"
    OPENLIBRARY = "openlibrary"
    GOODREADS = "goodreads"
    CALIBRE = "calibre"


@dataclass(frozen=True)
class Settings:
    """User settings for searching, rendering and writing book notes."""

    folder: str = ""
    file_name_format: str = ""
    frontmatter: str = ""
    content: str = ""
    use_default_frontmatter: bool = True
    default_frontmatter_key_type: FrontmatterKeyStyle = FrontmatterKeyStyle.CAMEL_CASE
    template_file: str = ""
    service_provider: ServiceProvider = ServiceProvider.GOOGLE
    locale_preference: str = "default"
    api_key: str = ""
    enable_cover_image_save: bool = False
    enable_cover_image_edge_curl: bool = True
    cover_image_path: str = ""
    warn_on_duplicate: bool = True
    calibre_server_url: str = "http://localhost:8080"
    calibre_library_id: str = "calibre"

    @property
    def uses_template_file(self) -> bool:
        return bool(self.template_file.strip())

    @property
    def needs_api_key(self) -> bool:
        return self.service_provider is ServiceProvider.GOOGLE

    @property
    def needs_calibre_server(self) -> bool:
        return self.service_provider is ServiceProvider.CALIBRE


def _enum_value(enum_cls: type[Enum], raw: Any, key: str) -> Enum:
    try:
        return enum_cls(raw)
    except ValueError as e:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ConfigError(f"Invalid value {raw!r} for {key} (expected one of: {allowed})") from e


def settings_from_dict(raw: dict[str, Any], base: Settings | None = None) -> Settings:
    """Build Settings from a flat mapping; unknown keys are ignored."""
    known = {f.name for f in fields(Settings)}
    values = {k: v for k, v in raw.items() if k in known}
    if "default_frontmatter_key_type" in values:
        values["default_frontmatter_key_type"] = _enum_value(
            FrontmatterKeyStyle, values["default_frontmatter_key_type"], "default_frontmatter_key_type"
        )
    if "service_provider" in values:
        values["service_provider"] = _enum_value(
            ServiceProvider, values["service_provider"], "service_provider"
        )
    return replace(base or Settings(), **values)


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from a TOML file.

    If path is None, searches for booknote.toml in the current directory then
    ~/.booknote/. Returns default settings if no file is found. Keys live at
    the top level or under a [booknote] table.
    """
    if path is None:
        for candidate in (Path.cwd() / "booknote.toml", DEFAULT_CONFIG_PATH):
            if candidate.exists():
                path = candidate
                break

    if path is None or not path.exists():
        return Settings()

    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e

    table = raw.get("booknote", raw)
    if not isinstance(table, dict):
        raise ConfigError(f"[booknote] in {path} must be a table")
    return settings_from_dict(table)
