"""Day-bucket keys and the file suffixes logroll recognises."""

from __future__ import annotations

import re
from datetime import datetime
from pathlib import Path

ARCHIVE_SUFFIX = ".zip"
PARTIAL_SUFFIX = ".zip.partial"

DAY_KEY_PATTERN = re.compile(r"^\d{6,8}$")


def day_key(timestamp: float) -> str:
  """Return the unpadded month-day-year key for a local timestamp.

  June 3rd 2024 becomes ``632024``. Keys are not unique across dates
  (1/11 and 11/1 of the same year share ``1112024``); such days share a bucket.
  """
  d = datetime.fromtimestamp(timestamp)
  return f"{d.month}{d.day}{d.year}"


def is_day_key(name: str) -> bool:
  return bool(DAY_KEY_PATTERN.match(name))


def is_archive(path: Path) -> bool:
  return path.name.lower().endswith(ARCHIVE_SUFFIX)


def is_partial(path: Path) -> bool:
  return path.name.lower().endswith(PARTIAL_SUFFIX)


def archive_path_for(log_dir: Path, key: str) -> Path:
  return log_dir / f"{key}{ARCHIVE_SUFFIX}"


def partial_path_for(log_dir: Path, key: str) -> Path:
  return log_dir / f"{key}{PARTIAL_SUFFIX}"


def list_archives(log_dir: Path) -> list[Path]:
  """Archives directly inside log_dir, oldest first (ties by name)."""
  archives = [p for p in log_dir.iterdir() if p.is_file() and is_archive(p)]
  return sorted(archives, key=lambda p: (p.stat().st_mtime, p.name))
