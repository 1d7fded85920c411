import os
from datetime import datetime
from pathlib import Path

from logroll.buckets import day_key, is_day_key, list_archives


def test_day_key_is_unpadded_month_day_year():
  assert day_key(datetime(2024, 6, 3, 12, 0).timestamp()) == "632024"
  assert day_key(datetime(2023, 12, 25, 8, 30).timestamp()) == "12252023"
  assert day_key(datetime(2024, 1, 11, 23, 59).timestamp()) == "1112024"


def test_is_day_key():
  assert is_day_key("632024")
  assert is_day_key("12252023")
  assert not is_day_key("12345")
  assert not is_day_key("123456789")
  assert not is_day_key("632024.zip")
  assert not is_day_key("logs")


def test_list_archives_oldest_first(log_dir: Path):
  for name, mtime in (("b.zip", 300), ("a.zip", 100), ("c.zip", 200)):
    p = log_dir / name
    p.write_bytes(b"x")
    os.utime(p, (mtime, mtime))
  (log_dir / "app.log").write_text("not an archive")
  (log_dir / "632024").mkdir()
  assert [p.name for p in list_archives(log_dir)] == ["a.zip", "c.zip", "b.zip"]
