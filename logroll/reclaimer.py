"""Space reclaimer: delete the oldest archives until free space clears a floor."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from .buckets import list_archives
from .errors import ReclaimError

logger = logging.getLogger(__name__)

MB = 1024 * 1024


@dataclass
class ReclaimResult:
  free_bytes: int = 0
  deficit: int = 0
  deleted: list[Path] = field(default_factory=list)
  freed_bytes: int = 0
  satisfied: bool = True


def free_space(path: Path) -> int:
  try:
    return shutil.disk_usage(path).free
  except OSError as e:
    raise ReclaimError(f"Could not query free space for {path}: {e}") from e


def reclaim_space(
  log_dir: Path,
  floor_bytes: int | None,
  *,
  free_bytes: int | None = None,
) -> ReclaimResult:
  """Delete archives oldest-first until the free-space deficit is covered.

  ``free_bytes`` overrides the volume query. Deletion stops as soon as the
  running total covers the deficit; if every archive is gone and the deficit
  is still open, ``satisfied`` is False.
  """
  result = ReclaimResult()
  if not floor_bytes:
    return result
  result.free_bytes = free_space(log_dir) if free_bytes is None else free_bytes
  if result.free_bytes >= floor_bytes:
    logger.debug(f"Free space {result.free_bytes / MB:.1f} MB meets floor {floor_bytes / MB:.1f} MB")
    return result

  result.deficit = floor_bytes - result.free_bytes
  logger.info(
    f"Free space {result.free_bytes / MB:.1f} MB below floor {floor_bytes / MB:.1f} MB; "
    f"reclaiming {result.deficit / MB:.1f} MB"
  )
  try:
    archives = list_archives(log_dir)
  except OSError as e:
    raise ReclaimError(f"Could not list archives in {log_dir}: {e}") from e

  freed = 0
  for archive in archives:
    if freed >= result.deficit:
      break
    try:
      size = archive.stat().st_size
      archive.unlink()
    except OSError as e:
      raise ReclaimError(f"Failed to delete {archive}: {e}") from e
    freed += size
    result.deleted.append(archive)
    logger.info(f"Deleted {archive.name} ({size / MB:.1f} MB) to reclaim space")

  result.freed_bytes = freed
  result.satisfied = freed >= result.deficit
  if not result.satisfied:
    logger.warning(
      f"Deleted every archive but reclaimed only {freed / MB:.1f} of {result.deficit / MB:.1f} MB"
    )
  return result
