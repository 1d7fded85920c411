"""Settings loader for logroll.

Values come from, highest precedence first: command-line options, environment
variables (a ``.env`` file is loaded best-effort), an optional YAML file, and
built-in defaults.

Example YAML file::

  log_location: /var/log/myapp
  low_disk_mb: 1024
  archive_age_days: 30
  expire_after_days: 365
  log_file: /var/log/logroll.log
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .errors import ConfigError

DEFAULT_ARCHIVE_AGE_DAYS = 30

# setting name -> environment variable
ENV_VARS = {
  "log_location": "LOGROLL_LOG_LOCATION",
  "low_disk_mb": "LOGROLL_LOW_DISK_MB",
  "archive_age_days": "LOGROLL_ARCHIVE_AGE_DAYS",
  "expire_after_days": "LOGROLL_EXPIRE_AFTER_DAYS",
  "log_file": "LOGROLL_LOG_FILE",
}
INT_SETTINGS = ("low_disk_mb", "archive_age_days", "expire_after_days")
PATH_SETTINGS = ("log_location", "log_file")
CONFIG_ENV_VAR = "LOGROLL_CONFIG"


@dataclass
class RetentionSettings:
  log_location: Path
  low_disk_mb: int | None = None
  archive_age_days: int = DEFAULT_ARCHIVE_AGE_DAYS
  expire_after_days: int | None = None
  log_file: Path | None = None

  @property
  def low_disk_bytes(self) -> int | None:
    return self.low_disk_mb * 1024 * 1024 if self.low_disk_mb else None


def load_yaml_settings(config_path: str | Path) -> dict[str, Any]:
  """Load a YAML settings file, keeping only known keys."""
  path = Path(config_path)
  if not path.exists():
    raise ConfigError(f"Configuration file not found: {path}")
  try:
    with open(path, encoding="utf-8") as file:
      data = yaml.safe_load(file)
  except yaml.YAMLError as e:
    raise ConfigError(f"Invalid YAML in configuration file {path}: {e}") from e
  if data is None:
    return {}
  if not isinstance(data, dict):
    raise ConfigError(f"Configuration file {path} must contain a mapping")
  unknown = sorted(set(data) - set(ENV_VARS))
  if unknown:
    raise ConfigError(f"Unknown setting(s) in {path}: {', '.join(unknown)}")
  return data


def env_settings(environ: dict[str, str] | None = None) -> dict[str, Any]:
  env = os.environ if environ is None else environ
  return {name: env[var] for name, var in ENV_VARS.items() if env.get(var, "") != ""}


def _to_int(name: str, value: Any) -> int:
  if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
    raise ConfigError(f"{name} must be an integer, got {value!r}")
  try:
    number = int(value)
  except (TypeError, ValueError) as e:
    raise ConfigError(f"{name} must be an integer, got {value!r}") from e
  if number < 0:
    raise ConfigError(f"{name} must not be negative, got {number}")
  return number


def build_settings(
  cli_values: dict[str, Any],
  *,
  config_path: str | Path | None = None,
  environ: dict[str, str] | None = None,
) -> RetentionSettings:
  """Merge YAML, environment and command-line values into RetentionSettings."""
  merged: dict[str, Any] = {}
  if config_path:
    merged.update(load_yaml_settings(config_path))
  merged.update(env_settings(environ))
  merged.update({k: v for k, v in cli_values.items() if v is not None})

  errors = []
  for name in INT_SETTINGS:
    if name in merged:
      try:
        merged[name] = _to_int(name, merged[name])
      except ConfigError as e:
        errors.append(str(e))
  for name in PATH_SETTINGS:
    value = merged.get(name)
    if value and not isinstance(value, (str, os.PathLike)):
      errors.append(f"{name} must be a path, got {value!r}")
  if not merged.get("log_location"):
    errors.append(
      f"log location is required (--log-location, {ENV_VARS['log_location']} or log_location in YAML)"
    )
  if errors:
    raise ConfigError(
      "Configuration validation failed:\n" + "\n".join(f"  - {error}" for error in errors)
    )

  return RetentionSettings(
    log_location=Path(merged["log_location"]).expanduser(),
    low_disk_mb=merged.get("low_disk_mb") or None,
    archive_age_days=merged.get("archive_age_days", DEFAULT_ARCHIVE_AGE_DAYS),
    expire_after_days=merged.get("expire_after_days") or None,
    log_file=Path(merged["log_file"]).expanduser() if merged.get("log_file") else None,
  )


def load_env_file() -> None:
  """Best-effort .env load so cron/systemd runs without explicit exports still work."""
  load_dotenv()
