from logroll.naming import resolve_entry_name, unique_entry_names


def test_unused_name_is_kept():
  assert resolve_entry_name("app.log", {"other.log"}) == "app.log"


def test_first_collision_gets_prefix_one():
  assert resolve_entry_name("app.log", ["app.log"]) == "1-app.log"


def test_existing_prefixes_are_never_reused():
  existing = {"foo.log", "1-foo.log"}
  assert resolve_entry_name("foo.log", existing) == "2-foo.log"


def test_smallest_unused_counter_wins():
  existing = {"foo.log", "1-foo.log", "3-foo.log"}
  assert resolve_entry_name("foo.log", existing) == "2-foo.log"


def test_repeated_runs_escalate():
  existing = {"foo.log"}
  for expected in ("1-foo.log", "2-foo.log", "3-foo.log", "4-foo.log"):
    name = resolve_entry_name("foo.log", existing)
    assert name == expected
    existing.add(name)


def test_prefixed_incoming_name_is_treated_literally():
  # An incoming "1-foo.log" collides only with itself
  assert resolve_entry_name("1-foo.log", {"foo.log", "1-foo.log"}) == "1-1-foo.log"


def test_batch_does_not_collide_with_itself():
  names = unique_entry_names(["a.log", "a.log", "b.log"], ["a.log"])
  assert names == ["1-a.log", "2-a.log", "b.log"]
  assert len(set(names)) == 3
