"""Archiver: move aged logs into day buckets and fold each bucket into <key>.zip.

A pass has two steps:

  1. Stage: every file older than the cutoff that passes the lock probe is
     moved into a directory named by its modification day key.
  2. Reconcile: every day-bucket directory present (including ones left behind
     by an interrupted run) is folded into its archive and then removed.

Folding never edits ``<key>.zip`` in place. The new archive is written to
``<key>.zip.partial`` and swapped in with ``os.replace``, and the bucket is only
removed once the swap has happened. An interruption at any point therefore
leaves either the old archive plus the bucket, or the new archive plus the
bucket; the next run resumes from either state without losing entries.
"""

from __future__ import annotations

import logging
import os
import shutil
import sys
import zipfile
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from .buckets import (
  archive_path_for,
  day_key,
  is_archive,
  is_day_key,
  is_partial,
  partial_path_for,
)
from .errors import ArchiveError
from .naming import resolve_entry_name, unique_entry_names

if sys.platform != "win32":
  import fcntl
else:  # pragma: no cover - windows relies on sharing violations
  fcntl = None

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400
COMPRESS_LEVEL = 9


@dataclass
class ArchiveResult:
  moved: list[Path] = field(default_factory=list)
  skipped_busy: list[Path] = field(default_factory=list)
  vanished: list[Path] = field(default_factory=list)
  created: list[Path] = field(default_factory=list)
  merged: list[Path] = field(default_factory=list)
  # (archive, incoming name, stored entry name) for every renamed entry
  renamed: list[tuple[Path, str, str]] = field(default_factory=list)


def can_acquire_exclusive(path: Path) -> bool:
  """Return True if ``path`` can be opened for writing and exclusively locked right now.

  Advisory and racy: a writer may open the file between this check and the
  move that follows. A busy file is simply picked up on a later run.
  """
  try:
    with path.open("r+b") as fh:
      if fcntl is not None:
        fcntl.flock(fh.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        fcntl.flock(fh.fileno(), fcntl.LOCK_UN)
  except (BlockingIOError, PermissionError):
    return False
  return True


def find_candidates(log_dir: Path, cutoff: float, exclude: Iterable[Path] = ()) -> list[Path]:
  """Plain files in log_dir modified at or before cutoff, oldest first.

  Paths in ``exclude`` (e.g. logroll's own log file) are never candidates.
  """
  excluded = {p.resolve() for p in exclude}
  found: list[tuple[float, str, Path]] = []
  for path in log_dir.iterdir():
    if not path.is_file() or is_archive(path) or is_partial(path):
      continue
    if excluded and path.resolve() in excluded:
      continue
    try:
      mtime = path.stat().st_mtime
    except FileNotFoundError:
      # Rotated away since the listing
      continue
    if mtime <= cutoff:
      found.append((mtime, path.name, path))
  found.sort()
  return [p for _, _, p in found]


def stage_file(log_dir: Path, path: Path, bucket_names: dict[Path, set[str]]) -> Path:
  """Move one log into its day bucket, creating the bucket on first use."""
  bucket = log_dir / day_key(path.stat().st_mtime)
  if bucket not in bucket_names:
    bucket.mkdir(exist_ok=True)
    bucket_names[bucket] = {p.name for p in bucket.iterdir()}
  taken = bucket_names[bucket]
  target_name = resolve_entry_name(path.name, taken)
  taken.add(target_name)
  if target_name != path.name:
    logger.debug(f"{bucket.name}/ already holds {path.name}; staging as {target_name}")
  dest = bucket / target_name
  shutil.move(str(path), str(dest))
  return dest


def find_buckets(log_dir: Path) -> list[Path]:
  return sorted(p for p in log_dir.iterdir() if p.is_dir() and is_day_key(p.name))


def fold_bucket(log_dir: Path, bucket: Path, result: ArchiveResult) -> None:
  """Fold one bucket into its archive, then delete the bucket."""
  key = bucket.name
  entries = sorted(bucket.iterdir())
  stray_dirs = [p.name for p in entries if not p.is_file()]
  if stray_dirs:
    raise ArchiveError(f"Bucket {bucket} contains unexpected entries: {', '.join(stray_dirs)}")

  if not entries:
    logger.debug(f"Removing empty bucket {bucket.name}/")
    bucket.rmdir()
    return

  archive = archive_path_for(log_dir, key)
  partial = partial_path_for(log_dir, key)
  merging = archive.exists()
  if merging and not zipfile.is_zipfile(archive):
    raise ArchiveError(f"{archive} exists but is not a readable zip archive")

  partial.unlink(missing_ok=True)
  if merging:
    shutil.copy2(archive, partial)
  with zipfile.ZipFile(
    partial,
    "a" if merging else "w",
    compression=zipfile.ZIP_DEFLATED,
    compresslevel=COMPRESS_LEVEL,
    strict_timestamps=False,
  ) as zf:
    before = len(zf.namelist())
    names = unique_entry_names([p.name for p in entries], zf.namelist())
    for path, name in zip(entries, names):
      zf.write(path, arcname=name)
      if name != path.name:
        result.renamed.append((archive, path.name, name))
        logger.debug(f"{archive.name}: {path.name} stored as {name}")
    after = len(zf.namelist())
  if after != before + len(entries):
    raise ArchiveError(
      f"{partial} has {after} entries, expected {before} + {len(entries)}; keeping {bucket}"
    )
  os.replace(partial, archive)

  if merging:
    result.merged.append(archive)
    logger.info(f"Merged {len(entries)} file(s) into {archive.name} ({after} entries)")
  else:
    result.created.append(archive)
    logger.info(f"Created {archive.name} with {len(entries)} file(s)")
  shutil.rmtree(bucket)


def archive_logs(
  log_dir: Path,
  age_days: int,
  now: float,
  *,
  exclude: Iterable[Path] = (),
) -> ArchiveResult:
  """Stage aged logs into day buckets and fold every bucket found into its archive.

  ``age_days`` of 0 disables the age filter (every non-archive file qualifies).
  Busy files and files that vanish mid-pass are skipped without error; paths in
  ``exclude`` are left alone. Move or zip failures raise ArchiveError and leave
  the affected bucket on disk for the next run.
  """
  result = ArchiveResult()
  cutoff = now - age_days * SECONDS_PER_DAY
  bucket_names: dict[Path, set[str]] = {}

  try:
    candidates = find_candidates(log_dir, cutoff, exclude)
  except OSError as e:
    raise ArchiveError(f"Could not scan {log_dir}: {e}") from e
  logger.debug(f"{len(candidates)} file(s) at or older than {age_days} day(s)")

  for path in candidates:
    try:
      if not can_acquire_exclusive(path):
        logger.debug(f"Skipping {path.name}: in use")
        result.skipped_busy.append(path)
        continue
      stage_file(log_dir, path, bucket_names)
    except FileNotFoundError:
      logger.debug(f"Skipping {path.name}: no longer exists")
      result.vanished.append(path)
      continue
    except OSError as e:
      raise ArchiveError(f"Failed to stage {path}: {e}") from e
    result.moved.append(path)

  try:
    buckets = find_buckets(log_dir)
  except OSError as e:
    raise ArchiveError(f"Could not scan {log_dir} for day buckets: {e}") from e

  for bucket in buckets:
    if bucket not in bucket_names:
      logger.info(f"Resuming leftover bucket {bucket.name}/")
    try:
      fold_bucket(log_dir, bucket, result)
    except (OSError, zipfile.BadZipFile) as e:
      raise ArchiveError(f"Failed to fold {bucket}: {e}") from e
  return result
