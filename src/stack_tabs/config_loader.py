# =============================================================================
# Configuration Loading
# =============================================================================

import os
import re
import time
import tomllib
from pathlib import Path

import platformdirs
from loguru import logger

from .errors import Error, ErrorReport, ErrorType, Result
from .logging_config import APP_NAME

CONFIG_DIR = Path(platformdirs.user_config_dir(APP_NAME))
CONFIG_PATH = CONFIG_DIR / "settings.toml"
CONFIG_PATH_ENV = "STACK_TABS_CONFIG"

# Default configuration - used as-is when no settings file exists
DEFAULT_CONFIG = {
    "blockMoveFilters": ["pinned"],
    "direction": "auto",
    "padding": 0,
    "enabled": True,
    "debug": False,
    "scopes": {},
}


def default_config_path() -> Path:
    """Settings file location, honouring the STACK_TABS_CONFIG override."""
    override = os.environ.get(CONFIG_PATH_ENV)
    if override:
        return Path(override).expanduser()
    return CONFIG_PATH


def extract_toml_error_context(error: tomllib.TOMLDecodeError, file_path: Path) -> dict:
    """
    Extract line context from TOML parse error.

    Args:
        error: The TOMLDecodeError exception
        file_path: Path to the TOML file

    Returns:
        Dict with line_number, line_content, and formatted_message
    """
    error_str = str(error)
    line_number = None
    line_content = None

    line_match = re.search(r'line\s+(\d+)', error_str, re.IGNORECASE)
    if line_match:
        line_number = int(line_match.group(1))

    if line_number and file_path.exists():
        try:
            with open(file_path, "r") as f:
                lines = f.readlines()
                if 0 < line_number <= len(lines):
                    line_content = lines[line_number - 1].rstrip()
        except OSError:
            pass

    if line_number:
        formatted = f"Error on line {line_number}"
        if line_content:
            display_line = line_content[:50] + "..." if len(line_content) > 50 else line_content
            formatted += f": {display_line}"
        formatted += f"\n\nDetails: {error_str}"
    else:
        formatted = f"TOML parse error: {error_str}"

    return {
        "line_number": line_number,
        "line_content": line_content,
        "formatted_message": formatted,
        "raw_error": error_str
    }


def deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base dictionary."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config_from_path(config_path: Path) -> Result[dict]:
    """
    Load configuration from a TOML file with defaults fallback.

    Args:
        config_path: Path to the settings TOML file

    Returns:
        Result[dict]: Ok with merged config, or Err with error details
    """
    start_time = time.perf_counter()
    logger.debug(
        "Loading config from path",
        operation="load_config_from_path",
        status="started",
        config_path=str(config_path)
    )

    if not config_path.exists():
        return Result.err(Error(
            error_type=ErrorType.FILE_NOT_FOUND,
            message=f"Config file not found: {config_path}",
            context={"config_path": str(config_path)}
        ))

    try:
        with open(config_path, "rb") as f:
            user_config = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        error_context = extract_toml_error_context(e, config_path)
        return Result.err(Error(
            error_type=ErrorType.PARSE_ERROR,
            message=error_context["formatted_message"],
            context={"config_path": str(config_path), "line_number": error_context["line_number"]},
            original_exception=e
        ))
    except OSError as e:
        return Result.err(Error(
            error_type=ErrorType.FILE_NOT_FOUND,
            message=f"Config file could not be read: {config_path}",
            context={"config_path": str(config_path), "error": str(e)},
            original_exception=e
        ))

    merged = deep_merge(DEFAULT_CONFIG, user_config)
    duration_ms = int((time.perf_counter() - start_time) * 1000)

    logger.debug(
        "Config loaded successfully",
        operation="load_config_from_path",
        status="success",
        config_path=str(config_path),
        metrics={"scopes_count": len(merged.get("scopes", {})), "duration_ms": duration_ms}
    )
    return Result.ok(merged)


def get_cfg_value(key: str, type_: str | None = None, config: dict | None = None):
    """
    Read one key from a raw configuration mapping, coercing its type.

    Args:
        key: Configuration key (e.g. "padding")
        type_: One of "string", "number", "boolean", or None for no coercion
        config: Raw configuration mapping; defaults to DEFAULT_CONFIG

    Returns:
        The coerced value, or None when the key is missing or not coercible
    """
    cfg = DEFAULT_CONFIG if config is None else config
    value = cfg.get(key)
    if value is None:
        return None

    try:
        if type_ == "string":
            return str(value)
        if type_ == "number":
            if isinstance(value, bool):
                raise ValueError("boolean is not a number")
            number = float(value)
            return int(number) if number.is_integer() else number
        if type_ == "boolean":
            if isinstance(value, str):
                lowered = value.strip().lower()
                if lowered in ("true", "1", "yes", "on"):
                    return True
                if lowered in ("false", "0", "no", "off", ""):
                    return False
                raise ValueError("not a boolean string")
            return bool(value)
    except (TypeError, ValueError) as e:
        logger.warning(
            "Ignoring configuration value of wrong type",
            operation="get_cfg_value",
            status="invalid",
            key=key,
            value=repr(value),
            expected=type_,
            error=str(e)
        )
        return None

    return value


def path_contains(folder: str, path: str) -> bool:
    """True if ``path`` is ``folder`` or lies below it; accepts / and \\ separators."""
    root = folder.rstrip("/\\")
    return path == root or path.startswith(root + "/") or path.startswith(root + "\\")


class ConfigStore:
    """Settings source with per-folder scope overrides.

    Global keys apply everywhere; each ``[scopes."<folder>"]`` table
    overrides them for resources inside that folder. Nested folders
    apply from the outermost to the innermost.
    """

    def __init__(self, config: dict | None = None, path: Path | None = None):
        self.path = path
        self.report = ErrorReport()
        self._config = deep_merge(DEFAULT_CONFIG, config or {})

    @classmethod
    def load(cls, path: Path | None = None) -> "ConfigStore":
        """Load the settings file, falling back to defaults on any error."""
        config_path = path or default_config_path()
        store = cls(path=config_path)
        store.reload()
        return store

    def reload(self) -> bool:
        """Re-read the settings file. Returns False when defaults are in use."""
        if self.path is None:
            return False

        self.report = ErrorReport()
        result = load_config_from_path(self.path)
        if result.is_ok():
            self._config = result.value
            return True

        # A missing settings file is the normal first-run state, not an error
        if self.path.exists():
            self.report.collect_result(result)
        logger.debug(
            "Using default configuration",
            operation="reload_config",
            status="fallback",
            config_path=str(self.path),
            error_type=result.error.error_type.value
        )
        self._config = deep_merge(DEFAULT_CONFIG, {})
        return False

    def get_configuration(self, scope: str | None = None) -> dict:
        """Effective raw key/value mapping for ``scope`` (a resource path)."""
        effective = {k: v for k, v in self._config.items() if k != "scopes"}
        if not scope:
            return effective

        scopes = self._config.get("scopes") or {}
        matching = sorted(
            (folder for folder in scopes if path_contains(folder, scope)),
            key=len
        )
        for folder in matching:
            override = scopes[folder]
            if isinstance(override, dict):
                effective = deep_merge(effective, override)
        return effective
