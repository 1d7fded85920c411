"""Entry-name collision resolution for daily archives."""

from __future__ import annotations

from collections.abc import Container, Iterable


def resolve_entry_name(name: str, existing: Container[str]) -> str:
  """Return ``name`` or the first free ``<n>-<name>`` with n counting from 1.

  Re-running against an archive holding ``foo.log`` and ``1-foo.log`` yields
  ``2-foo.log``; an existing entry is never reused.
  """
  if name not in existing:
    return name
  counter = 1
  while f"{counter}-{name}" in existing:
    counter += 1
  return f"{counter}-{name}"


def unique_entry_names(names: Iterable[str], existing: Iterable[str]) -> list[str]:
  """Resolve a batch of names so none collides with existing or with each other."""
  taken = set(existing)
  resolved: list[str] = []
  for name in names:
    chosen = resolve_entry_name(name, taken)
    taken.add(chosen)
    resolved.append(chosen)
  return resolved
