#!/usr/bin/env python3
"""Daily log archiver with free-space and retention housekeeping.

Runs three phases against one log directory, in order:

  1. Reclaim space: if --low-disk is set and free space is below it, delete the
     oldest ``*.zip`` archives until the shortfall is covered.
  2. Archive: move files older than --archive-age days into per-day buckets and
     fold each bucket into ``<month><day><year>.zip`` (merging into an existing
     archive, renaming colliding entries ``1-name``, ``2-name``, ...).
  3. Expire: if --expire-after is set, delete archives older than that many days.

Environment variables (loaded from .env best-effort):
  LOGROLL_LOG_LOCATION, LOGROLL_LOW_DISK_MB, LOGROLL_ARCHIVE_AGE_DAYS,
  LOGROLL_EXPIRE_AFTER_DAYS, LOGROLL_LOG_FILE, LOGROLL_CONFIG (YAML file)

Usage:
  logroll --log-location /var/log/app
  logroll --log-location /var/log/app --low-disk 1024 --archive-age 7 --expire-after 90
  logroll --config logroll.yml --verbose
  logroll --log-location /var/log/app --list

Exit codes:
  0 all phases completed
  1 completed, but the free-space floor is still unmet after deleting every archive
  2 fatal (invalid settings / missing directory / a phase failed)
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from datetime import datetime
from pathlib import Path

from .archiver import archive_logs
from .buckets import list_archives
from .errors import LogrollError
from .expirer import expire_archives
from .reclaimer import MB, reclaim_space
from .settings import CONFIG_ENV_VAR, RetentionSettings, build_settings, load_env_file

logger = logging.getLogger("logroll")


def setup_logging(log_file: Path | None, verbose: bool) -> logging.Logger:
  """Console handler (concise) plus an optional detailed file handler."""
  logger.setLevel(logging.DEBUG)
  logger.handlers.clear()

  ch = logging.StreamHandler()
  ch.setLevel(logging.DEBUG if verbose else logging.INFO)
  ch.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
  logger.addHandler(ch)

  if log_file is not None:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    fh = logging.FileHandler(log_file)
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(
      "%(asctime)s - %(levelname)s - %(message)s",
      datefmt="%Y-%m-%d %H:%M:%S"
    ))
    logger.addHandler(fh)
  return logger


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
  p = argparse.ArgumentParser(
    prog="logroll", description="Archive aged log files into daily zip archives"
  )
  p.add_argument("--log-location", metavar="PATH", help="Directory holding the log files")
  p.add_argument(
    "--low-disk",
    dest="low_disk_mb",
    type=int,
    metavar="MB",
    help="Delete oldest archives while free space is below this many MB",
  )
  p.add_argument(
    "--archive-age",
    dest="archive_age_days",
    type=int,
    metavar="DAYS",
    help="Archive files at least this many days old (default: 30, 0 archives everything)",
  )
  p.add_argument(
    "--expire-after",
    dest="expire_after_days",
    type=int,
    metavar="DAYS",
    help="Delete archives older than this many days",
  )
  p.add_argument(
    "--config",
    default=os.getenv(CONFIG_ENV_VAR),
    metavar="FILE",
    help=f"YAML settings file (default: ${CONFIG_ENV_VAR})",
  )
  p.add_argument("--log-file", metavar="FILE", help="Also write a detailed log to this file")
  p.add_argument("--verbose", action="store_true", help="Show debug output on the console")
  p.add_argument("--list", action="store_true", help="List existing archives and exit")
  return p.parse_args(argv)


def list_command(settings: RetentionSettings) -> int:
  archives = list_archives(settings.log_location)
  if not archives:
    print("(no archives found)")
    return 0
  for a in archives:
    st = a.stat()
    modified = datetime.fromtimestamp(st.st_mtime).strftime("%Y-%m-%d %H:%M")
    print(f"{a.name}\t{st.st_size / MB:.2f} MB\t{modified}")
  return 0


def run(settings: RetentionSettings, now: float | None = None) -> int:
  """Run reclaim, archive and expire against settings.log_location; return the exit code."""
  log_dir = settings.log_location
  now = time.time() if now is None else now

  try:
    reclaimed = reclaim_space(log_dir, settings.low_disk_bytes)
    own_log = [settings.log_file] if settings.log_file else []
    archived = archive_logs(log_dir, settings.archive_age_days, now, exclude=own_log)
    expired = expire_archives(log_dir, settings.expire_after_days, now)
  except LogrollError as e:
    logger.error(str(e))
    logger.error("Aborted; remaining phases were not run")
    return 2

  logger.info("=" * 60)
  logger.info("SUMMARY")
  logger.info("=" * 60)
  if settings.low_disk_mb:
    logger.info(
      f"Reclaim: deleted {len(reclaimed.deleted)} archive(s), freed {reclaimed.freed_bytes / MB:.2f} MB"
    )
  logger.info(
    f"Archive: moved {len(archived.moved)} file(s), skipped {len(archived.skipped_busy)} busy, {len(archived.vanished)} vanished, "
    f"created {len(archived.created)}, merged {len(archived.merged)}, renamed {len(archived.renamed)}"
  )
  if settings.expire_after_days:
    logger.info(
      f"Expire: deleted {len(expired.deleted)} archive(s), freed {expired.freed_bytes / MB:.2f} MB"
    )

  if not reclaimed.satisfied:
    return 1
  return 0


def main(argv: list[str] | None = None) -> int:
  load_env_file()
  args = parse_args(argv)
  cli_values = {
    "log_location": args.log_location,
    "low_disk_mb": args.low_disk_mb,
    "archive_age_days": args.archive_age_days,
    "expire_after_days": args.expire_after_days,
    "log_file": args.log_file,
  }
  try:
    settings = build_settings(cli_values, config_path=args.config)
  except LogrollError as e:
    print(f"❌ {e}", file=sys.stderr)
    return 2

  if not settings.log_location.is_dir():
    print(f"❌ Log location is not a directory: {settings.log_location}", file=sys.stderr)
    return 2

  if args.list:
    return list_command(settings)

  try:
    setup_logging(settings.log_file, args.verbose)
  except OSError as e:
    print(f"❌ Cannot open log file {settings.log_file}: {e}", file=sys.stderr)
    return 2
  logger.info(f"Log location: {settings.log_location}")
  return run(settings)


if __name__ == "__main__":
  sys.exit(main())
