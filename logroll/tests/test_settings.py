from pathlib import Path

import pytest

from logroll.errors import ConfigError
from logroll.settings import DEFAULT_ARCHIVE_AGE_DAYS, build_settings, load_yaml_settings


def write_yaml(path: Path, text: str) -> Path:
  path.write_text(text, encoding="utf-8")
  return path


def test_defaults_from_cli_only(tmp_path: Path):
  s = build_settings({"log_location": str(tmp_path)}, environ={})
  assert s.log_location == tmp_path
  assert s.archive_age_days == DEFAULT_ARCHIVE_AGE_DAYS
  assert s.low_disk_mb is None
  assert s.low_disk_bytes is None
  assert s.expire_after_days is None
  assert s.log_file is None


def test_precedence_cli_over_env_over_yaml(tmp_path: Path):
  cfg = write_yaml(
    tmp_path / "logroll.yml",
    "log_location: /from/yaml\narchive_age_days: 5\nexpire_after_days: 90\nlow_disk_mb: 10\n",
  )
  env = {"LOGROLL_ARCHIVE_AGE_DAYS": "7", "LOGROLL_LOW_DISK_MB": "20"}

  s = build_settings(
    {"log_location": None, "archive_age_days": None, "low_disk_mb": 30},
    config_path=cfg,
    environ=env,
  )

  assert s.log_location == Path("/from/yaml")
  assert s.archive_age_days == 7
  assert s.low_disk_mb == 30
  assert s.low_disk_bytes == 30 * 1024 * 1024
  assert s.expire_after_days == 90


def test_zero_age_is_kept(tmp_path: Path):
  s = build_settings({"log_location": str(tmp_path), "archive_age_days": 0}, environ={})
  assert s.archive_age_days == 0


def test_missing_log_location(tmp_path: Path):
  with pytest.raises(ConfigError, match="log location is required"):
    build_settings({}, environ={})


@pytest.mark.parametrize("value", ["abc", "-1", "1.5"])
def test_invalid_integers_rejected(tmp_path: Path, value: str):
  with pytest.raises(ConfigError):
    build_settings(
      {"log_location": str(tmp_path)}, environ={"LOGROLL_EXPIRE_AFTER_DAYS": value}
    )


def test_yaml_unknown_key(tmp_path: Path):
  cfg = write_yaml(tmp_path / "bad.yml", "log_location: /x\nretain: 3\n")
  with pytest.raises(ConfigError, match="retain"):
    load_yaml_settings(cfg)


def test_yaml_invalid(tmp_path: Path):
  cfg = write_yaml(tmp_path / "bad.yml", "log_location: [unclosed\n")
  with pytest.raises(ConfigError, match="Invalid YAML"):
    load_yaml_settings(cfg)


def test_yaml_missing_file(tmp_path: Path):
  with pytest.raises(ConfigError, match="not found"):
    load_yaml_settings(tmp_path / "nope.yml")


def test_empty_yaml_is_allowed(tmp_path: Path):
  cfg = write_yaml(tmp_path / "empty.yml", "")
  assert load_yaml_settings(cfg) == {}


def test_yaml_non_path_location_rejected(tmp_path: Path):
  cfg = write_yaml(tmp_path / "logroll.yml", "log_location: 123\n")
  with pytest.raises(ConfigError, match="log_location must be a path"):
    build_settings({}, config_path=cfg, environ={})


def test_yaml_fractional_days_rejected(tmp_path: Path):
  cfg = write_yaml(tmp_path / "logroll.yml", f"log_location: {tmp_path}\narchive_age_days: 1.5\n")
  with pytest.raises(ConfigError, match="archive_age_days must be an integer"):
    build_settings({}, config_path=cfg, environ={})


def test_yaml_whole_float_days_accepted(tmp_path: Path):
  cfg = write_yaml(tmp_path / "logroll.yml", f"log_location: {tmp_path}\nexpire_after_days: 90.0\n")
  assert build_settings({}, config_path=cfg, environ={}).expire_after_days == 90
