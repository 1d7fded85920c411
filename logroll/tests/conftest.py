import os
import time
from pathlib import Path

import pytest

DAY = 86400


def create_file(path: Path, data: bytes = b"data", age_days: float = 0, now: float | None = None) -> Path:
  path.parent.mkdir(parents=True, exist_ok=True)
  path.write_bytes(data)
  if age_days:
    set_age(path, age_days, now)
  return path


def set_age(path: Path, age_days: float, now: float | None = None) -> None:
  ts = (time.time() if now is None else now) - age_days * DAY
  os.utime(path, (ts, ts))


def create_sparse(path: Path, size: int, mtime: float) -> Path:
  with path.open("wb") as f:
    f.truncate(size)
  os.utime(path, (mtime, mtime))
  return path


@pytest.fixture
def log_dir(tmp_path: Path) -> Path:
  d = tmp_path / "logs"
  d.mkdir()
  return d
