"""Configuration loading and management."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
import tomllib

from .constants import DEFAULT_EXTENSIONS, DEFAULT_FORMATTER_TIMEOUT, DEFAULT_MAX_FILE_SIZE

CONFIG_TABLE = "nonnls-markers"


@dataclass
class MarkerConfig:
    """Configuration for the nonnls-markers command-line tool.

    Attributes:
        extensions: File extensions accepted as source files.
        formatter_command: External formatter run by ``format``; it reads the
            source on stdin and writes the result to stdout.
        formatter_timeout: Seconds to wait for the formatter command.
        max_file_size: Maximum file size in bytes that will be processed.
        trace: Whether to echo diagnostic traces to stderr.

    Examples:
        MarkerConfig(extensions=[".java", ".jav"], formatter_command="google-java-format -")
    """

    extensions: list[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    formatter_command: str | None = None
    formatter_timeout: int = DEFAULT_FORMATTER_TIMEOUT
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    trace: bool = False


class ConfigError(ValueError):
    """Exception raised when configuration values are invalid.

    Examples:
        raise ConfigError("`formatter_timeout` must be a positive integer")
    """


CONFIG_SOURCES: tuple[tuple[str, tuple[tuple[str, ...], ...]], ...] = (
    ("pyproject.toml", (("tool", CONFIG_TABLE),)),
    (f".{CONFIG_TABLE}.toml", ((CONFIG_TABLE,), ("tool", CONFIG_TABLE))),
)


def load_config(search_path: Path) -> MarkerConfig:
    """Load configuration from the nearest config file.

    Each directory from `search_path` up to the filesystem root is checked for
    `pyproject.toml` (table ``[tool.nonnls-markers]``), then for
    `.nonnls-markers.toml` (table ``[nonnls-markers]`` or
    ``[tool.nonnls-markers]``). The first table found wins, even when empty.
    Files that cannot be read or parsed are skipped.

    Args:
        search_path: Directory used as the starting point for configuration lookup.

    Returns:
        MarkerConfig: Loaded configuration, or defaults when no file is found.

    Raises:
        ConfigError: If the table found is not a table or has unknown keys.

    Examples:
        load_config(Path("src/main/java"))
    """
    start = search_path.resolve()
    for directory in (start, *start.parents):
        for filename, table_paths in CONFIG_SOURCES:
            found = _find_table(directory / filename, table_paths)
            if found is not None:
                return normalize_config(_config_from_table(*found))
    return MarkerConfig()


def _read_toml(path: Path) -> dict | None:
    try:
        with open(path, "rb") as stream:
            return tomllib.load(stream)
    except (OSError, tomllib.TOMLDecodeError):
        return None


def _find_table(
    path: Path, table_paths: tuple[tuple[str, ...], ...]
) -> tuple[object, str, Path] | None:
    if not path.is_file():
        return None
    document = _read_toml(path)
    if document is None:
        return None

    for table_path in table_paths:
        node: object = document
        for key in table_path:
            node = node.get(key) if isinstance(node, dict) else None
        # TOML has no null: None means the table is absent.
        if node is not None:
            return node, ".".join(table_path), path
    return None


def _config_from_table(table: object, table_name: str, path: Path) -> MarkerConfig:
    if not isinstance(table, dict):
        raise ConfigError(f"`{table_name}` in {path} must be a table")

    unknown = sorted(set(table) - {option.name for option in fields(MarkerConfig)})
    if unknown:
        raise ConfigError(f"Unknown `[{table_name}]` keys in {path}: {', '.join(unknown)}")
    return MarkerConfig(**table)


def normalize_config(config: MarkerConfig) -> MarkerConfig:
    """Lower-case extensions and add their leading dot (``"java"`` -> ``".java"``)."""
    extensions = config.extensions
    if isinstance(extensions, str):
        extensions = [extensions]
    if isinstance(extensions, (list, tuple)) and all(isinstance(ext, str) for ext in extensions):
        extensions = [
            ext.lower() if ext.startswith(".") or not ext else f".{ext.lower()}"
            for ext in extensions
        ]
    return replace(config, extensions=extensions)


def validate_config(config: MarkerConfig) -> None:
    """Validate a `MarkerConfig` instance.

    Args:
        config: Configuration to validate.

    Returns:
        None.

    Raises:
        ConfigError: If extensions are missing or malformed, the formatter
            command is blank, numeric limits are non-positive, or `trace` is
            not a boolean.

    Examples:
        validate_config(MarkerConfig(formatter_timeout=30))
    """
    config = normalize_config(config)

    if not isinstance(config.extensions, list) or not config.extensions:
        raise ConfigError("`extensions` must be a non-empty list of file extensions")
    for extension in config.extensions:
        if not isinstance(extension, str) or len(extension) < 2:
            raise ConfigError(f"Invalid extension in `extensions`: {extension!r}")

    if config.formatter_command is not None:
        if not isinstance(config.formatter_command, str) or not config.formatter_command.strip():
            raise ConfigError("`formatter_command` must be a non-empty string")

    if not isinstance(config.trace, bool):
        raise ConfigError("`trace` must be a boolean")

    for name in ("formatter_timeout", "max_file_size"):
        _require_positive_int(name, getattr(config, name))


def apply_overrides(config: MarkerConfig, **overrides: object) -> MarkerConfig:
    """Apply override values to a `MarkerConfig`.

    Args:
        config: Base configuration to update.
        overrides: Override values keyed by configuration field name; values set to
            None are ignored.

    Returns:
        MarkerConfig: New configuration with the overrides applied. The original
        configuration is returned when no changes are supplied.

    Raises:
        TypeError: If an override name is not defined on `MarkerConfig`.

    Examples:
        updated = apply_overrides(config, formatter_command="google-java-format -")
    """
    changes = {key: value for key, value in overrides.items() if value is not None}
    if not changes:
        return config
    return replace(config, **changes)


def build_config(search_path: Path, **overrides: object) -> MarkerConfig:
    """Load, override, and validate configuration.

    Args:
        search_path: Directory where configuration files are resolved.
        overrides: Override values keyed by configuration attributes; None values
            are ignored.

    Returns:
        MarkerConfig: Validated configuration.

    Raises:
        ConfigError: If configuration loading or validation fails.

    Examples:
        config = build_config(Path.cwd(), trace=True)
    """
    config = load_config(search_path)
    config = apply_overrides(config, **overrides)
    config = normalize_config(config)
    validate_config(config)
    return config


def _require_positive_int(name: str, value: object) -> None:
    # bool is an int subclass but never a valid limit
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"`{name}` must be a positive integer")
