"""Expirer: delete daily archives past the retention period."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from .buckets import list_archives
from .errors import ExpireError

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400


@dataclass
class ExpireResult:
  deleted: list[Path] = field(default_factory=list)
  freed_bytes: int = 0


def expire_archives(log_dir: Path, retention_days: int | None, now: float) -> ExpireResult:
  """Delete every archive whose mtime + retention_days is at or before now."""
  result = ExpireResult()
  if not retention_days:
    return result
  retention = retention_days * SECONDS_PER_DAY
  try:
    archives = list_archives(log_dir)
  except OSError as e:
    raise ExpireError(f"Could not list archives in {log_dir}: {e}") from e

  for archive in archives:
    try:
      st = archive.stat()
      if st.st_mtime + retention > now:
        continue
      archive.unlink()
    except OSError as e:
      raise ExpireError(f"Failed to delete {archive}: {e}") from e
    result.deleted.append(archive)
    result.freed_bytes += st.st_size
    logger.info(f"Expired {archive.name} (older than {retention_days} day(s))")
  return result
