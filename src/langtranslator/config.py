"""Explicit run settings: defaults, TOML config file, environment, overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]

from langtranslator.errors import ConfigurationError

DEFAULT_CONFIG_FILE = "langtranslator.toml"
CONFIG_TABLE = "langtranslator"

BACKENDS = ("google-v2", "google-v3", "dummy")

# Environment variable → Settings field
ENV_VARS = {
    "GOOGLE_TRANSLATE_API_KEY": "api_key",
    "GOOGLE_TRANSLATE_PROJECT_ID": "project_id",
    "GOOGLE_APPLICATION_CREDENTIALS": "credentials_path",
    "LANGTRANSLATOR_BACKEND": "backend",
    "LANGTRANSLATOR_VERIFY_SSL": "verify_ssl",
    "LANGTRANSLATOR_LANG_PATH": "lang_path",
}

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    """Everything the orchestrator and the backends need to know."""

    lang_path: Path = Path("lang")
    backend: str = "google-v2"
    api_key: str | None = None
    project_id: str | None = None
    credentials_path: Path | None = None
    verify_ssl: bool = True
    timeout: float = 30.0
    max_workers: int = 1
    max_concurrent_requests: int = 4
    dry_run: bool = False

    def validate(self) -> Settings:
        """Check backend requirements and numeric ranges.

        Raises:
            ConfigurationError: On the first problem found.
        """
        if self.backend not in BACKENDS:
            raise ConfigurationError(
                f"Unknown backend '{self.backend}'. Choose one of: {', '.join(BACKENDS)}"
            )
        if self.backend == "google-v2" and not self.api_key:
            raise ConfigurationError(
                "Google Translate v2 API key required. "
                "Use --api-key or set GOOGLE_TRANSLATE_API_KEY."
            )
        if self.backend == "google-v3":
            if not self.project_id:
                raise ConfigurationError(
                    "Google Translate v3 project id required. "
                    "Use --project-id or set GOOGLE_TRANSLATE_PROJECT_ID."
                )
            if not self.credentials_path:
                raise ConfigurationError(
                    "Service account credentials required. "
                    "Use --credentials or set GOOGLE_APPLICATION_CREDENTIALS."
                )
        if self.timeout <= 0:
            raise ConfigurationError("timeout must be positive")
        if self.max_workers < 1:
            raise ConfigurationError("max_workers must be at least 1")
        if self.max_concurrent_requests < 1:
            raise ConfigurationError("max_concurrent_requests must be at least 1")
        return self


def _parse_bool(name: str, value: object) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigurationError(f"Invalid boolean for {name}: {value!r}")


def _coerce(name: str, value: object) -> object:
    """Convert a raw config/env value to the type of the Settings field."""
    try:
        if name in ("lang_path", "credentials_path"):
            return Path(os.path.expanduser(str(value)))
        if name in ("verify_ssl", "dry_run"):
            return _parse_bool(name, value)
        if name == "timeout":
            return float(value)  # type: ignore[arg-type]
        if name in ("max_workers", "max_concurrent_requests"):
            return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid value for {name}: {value!r}") from e
    return str(value)


def read_config_file(path: Path) -> dict[str, object]:
    """Read the ``[langtranslator]`` table of a TOML config file."""
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid config file {path}: {e}") from e

    table = data.get(CONFIG_TABLE, data)
    if not isinstance(table, dict):
        raise ConfigurationError(f"[{CONFIG_TABLE}] in {path} must be a table")

    known = {f.name for f in fields(Settings)}
    unknown = set(table) - known
    if unknown:
        raise ConfigurationError(
            f"Unknown setting(s) in {path}: {', '.join(sorted(unknown))}"
        )
    return {k: _coerce(k, v) for k, v in table.items()}


def load_settings(
    config_path: str | Path | None = None,
    *,
    environ: dict[str, str] | None = None,
    **overrides: object,
) -> Settings:
    """Resolve settings from defaults, config file, environment and overrides.

    Later sources win. ``None`` overrides are ignored so CLI options that
    were not given fall through to the other sources. When no config path
    is given, ``langtranslator.toml`` in the working directory is used if
    it exists.

    Raises:
        ConfigurationError: If a source is unreadable or a value is invalid.
    """
    env = os.environ if environ is None else environ
    values: dict[str, object] = {}

    if config_path is not None:
        path = Path(config_path)
        if not path.is_file():
            raise ConfigurationError(f"Config file not found: {path}")
        values.update(read_config_file(path))
    elif Path(DEFAULT_CONFIG_FILE).is_file():
        values.update(read_config_file(Path(DEFAULT_CONFIG_FILE)))

    for var, name in ENV_VARS.items():
        raw = env.get(var)
        if raw:
            values[name] = _coerce(name, raw)

    known = {f.name for f in fields(Settings)}
    for name, value in overrides.items():
        if name not in known:
            raise TypeError(f"Unknown setting: {name}")
        if value is not None:
            values[name] = _coerce(name, value)

    return replace(Settings(), **values)
