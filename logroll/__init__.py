"""Daily log archiving and retention.

Phases are importable individually (``reclaim_space``, ``archive_logs``,
``expire_archives``); ``logroll.cli`` runs them in order.
"""

from .archiver import ArchiveResult, archive_logs, can_acquire_exclusive
from .errors import ArchiveError, ConfigError, ExpireError, LogrollError, ReclaimError
from .expirer import ExpireResult, expire_archives
from .naming import resolve_entry_name, unique_entry_names
from .reclaimer import ReclaimResult, reclaim_space

__version__ = "0.1.0"

__all__ = [
  "ArchiveError",
  "ArchiveResult",
  "ConfigError",
  "ExpireError",
  "ExpireResult",
  "LogrollError",
  "ReclaimError",
  "ReclaimResult",
  "archive_logs",
  "can_acquire_exclusive",
  "expire_archives",
  "reclaim_space",
  "resolve_entry_name",
  "unique_entry_names",
]
