"""Exception types raised by the retention phases."""

from __future__ import annotations


class LogrollError(Exception):
  """Base class for fatal logroll errors."""


class ConfigError(LogrollError):
  """Invalid or missing settings."""


class ReclaimError(LogrollError):
  """Free-space query or archive deletion failed while reclaiming space."""


class ArchiveError(LogrollError):
  """A move or zip operation failed while archiving logs."""


class ExpireError(LogrollError):
  """An expired archive could not be deleted."""
