"""Scoped Store: project-scoped get/set/remove/list/export/import/clear.

Invariants:
    - Round trip: set(k, v, p) then get(k, d, p) == v for JSON values
    - Projects are isolated from each other and from the global namespace
    - Corrupt entries read as the default and never raise
    - clear_project removes only the target project's keys
    - export/import reproduces a project under another id
"""

from datetime import date

import pytest

from fieldreport.core.default_states import FixedClock
from fieldreport.core.domain_types import KeyScheme, ReadOutcome, WriteOutcome
from fieldreport.core.key_codec import KeyCodec
from fieldreport.services.scoped_store import ScopedStore


# -- Round trip ----------------------------------------------------------------

@pytest.mark.parametrize("value", [
    {"client": "ACME", "photos": []},
    [{"id": 1, "date": "2026-01-01"}],
    "text",
    0,
    3.5,
    False,
    None,
])
def test_set_then_get_returns_value(store, value):
    assert store.set("reportData", value, "p1") is True
    assert store.get("reportData", "DEFAULT", "p1") == value


def test_get_missing_returns_default_unchanged(store):
    default = {"client": ""}
    assert store.get("reportData", default, "p1") is default


def test_writes_use_derived_physical_key(store, backend):
    store.set("workDays", [], "p1")
    assert backend.get_item("p1_workDays") == "[]"


# -- Scoping -------------------------------------------------------------------

def test_projects_are_isolated(store):
    store.set("reportData", {"client": "one"}, "p1")
    store.set("reportData", {"client": "two"}, "p2")
    assert store.get("reportData", None, "p1") == {"client": "one"}
    assert store.get("reportData", None, "p2") == {"client": "two"}


def test_ambient_project_used_when_omitted(backend):
    store = ScopedStore(backend, project_id="job9")
    store.set("equipment", {"truck": "F350"})
    assert backend.get_item("job9_equipment") is not None
    assert store.get("equipment") == {"truck": "F350"}


def test_explicit_empty_project_overrides_ambient(backend):
    store = ScopedStore(backend, project_id="job9")
    store.set("theme", "dark", "")
    assert backend.get_item("theme") == '"dark"'


def test_global_operations_bypass_scoping(backend):
    store = ScopedStore(backend, project_id="job9")
    assert store.set_global("rateSheets", [1, 2])
    assert backend.get_item("rateSheets") == "[1, 2]"
    assert store.get_global("rateSheets") == [1, 2]
    assert store.get("rateSheets") is None
    assert store.remove_global("rateSheets")
    assert store.get_global("rateSheets", "gone") == "gone"


def test_default_layout_reads_timestamped_project_keys(backend):
    backend.set_item("currentProjectId", "project_1700000000000")
    backend.set_item("project_1700000000000_reportData", '{"client": "ACME"}')

    store = ScopedStore(backend)

    assert store.read("reportData").physical_key == "project_1700000000000_reportData"
    assert store.get("reportData", "DEFAULT") == {"client": "ACME"}
    assert store.list_keys_for_project() == ["reportData"]


def test_plain_layout_lets_prefix_project_claim_keys(store):
    store.set("c", "second", "a_b")
    assert store.list_keys_for_project("a") == ["b_c"]


def test_escaped_layout_keeps_separator_projects_apart(backend):
    store = ScopedStore(backend, codec=KeyCodec(KeyScheme.ESCAPED), project_id="")
    store.set("b_c", "first", "a")
    store.set("c", "second", "a_b")
    assert store.get("b_c", None, "a") == "first"
    assert store.get("c", None, "a_b") == "second"
    assert store.list_keys_for_project("a") == ["b_c"]


def test_plain_scheme_reproduces_naive_layout(backend):
    store = ScopedStore(backend, codec=KeyCodec(KeyScheme.PLAIN), project_id="")
    store.set("k", 1, "a_b")
    assert backend.get_item("a_b_k") == "1"


# -- Corruption and failures ---------------------------------------------------

def test_corrupt_entry_returns_default(store, backend):
    backend.set_item("p1_reportData", "{not json")
    assert store.get("reportData", {"fallback": True}, "p1") == {"fallback": True}


def test_read_distinguishes_miss_from_corrupt(store, backend):
    backend.set_item("p1_workDays", "undefined")
    corrupt = store.read("workDays", [], "p1")
    missing = store.read("borings", [], "p1")

    assert corrupt.outcome == ReadOutcome.CORRUPT
    assert corrupt.value == []
    assert corrupt.error
    assert missing.outcome == ReadOutcome.MISS
    assert not missing.found and missing.used_default


def test_read_takes_default_before_project_like_get(store):
    store.set("reportData", {"client": "x"}, "p1")
    assert store.read("reportData", "DEFAULT", "p1").value == {"client": "x"}
    assert store.read("equipment", "DEFAULT", "p1").value == "DEFAULT"
    assert store.read("equipment", "DEFAULT", "p1").physical_key == "p1_equipment"


def test_corrupt_entry_is_logged(store, backend, caplog):
    backend.set_item("p1_reportData", "<html>")
    store.get("reportData", None, "p1")
    assert "Error loading from storage" in caplog.text


def test_unserializable_value_reports_false(store, backend):
    assert store.set("reportData", {"when": date(2026, 1, 1)}, "p1") is False
    result = store.write("reportData", object(), "p1")
    assert result.outcome == WriteOutcome.UNSERIALIZABLE
    assert backend.get_item("p1_reportData") is None


def test_backend_failures_never_raise(failing_backend):
    store = ScopedStore(failing_backend, project_id="p1")
    store.set("reportData", {"a": 1})

    failing_backend.fail_reads = True
    failing_backend.fail_writes = True

    assert store.get("reportData", "default") == "default"
    assert store.read("reportData").outcome == ReadOutcome.FAILED
    assert store.set("reportData", {"a": 2}) is False
    assert store.remove("reportData") is False
    assert store.list_keys_for_project() == []
    assert store.clear_project() == 0


# -- Quota ---------------------------------------------------------------------

def test_quota_exceeded_returns_false_and_notifies(small_store, small_backend, notices):
    assert small_store.set("reportData", "x" * 50) is True
    result = small_store.write("suppliesData", "y" * 500)

    assert result.outcome == WriteOutcome.QUOTA_EXCEEDED
    assert small_backend.get_item("p1_suppliesData") is None
    assert len(notices) == 1
    assert "Storage limit reached" in notices[0]


def test_quota_rejection_keeps_previous_value(small_store):
    small_store.set("reportData", "small")
    assert small_store.set("reportData", "z" * 500) is False
    assert small_store.get("reportData") == "small"


def test_usage_counts_keys_and_values(store, backend):
    backend.set_item("ab", "cd")
    backend.set_item("e", "fgh")
    usage = store.usage()
    assert usage.used_bytes == 8
    assert usage.used_kb == pytest.approx(8 / 1024)


# -- Remove / list / clear -----------------------------------------------------

def test_remove_deletes_one_key(store):
    store.set("reportData", 1, "p1")
    store.set("equipment", 2, "p1")
    assert store.remove("reportData", "p1") is True
    assert store.get("reportData", None, "p1") is None
    assert store.get("equipment", None, "p1") == 2


def test_remove_missing_key_succeeds(store):
    assert store.remove("nothing", "p1") is True


def test_list_keys_strips_prefix_in_enumeration_order(store):
    store.set("reportData", 1, "p1")
    store.set("other", 1, "p2")
    store.set("workDays", 1, "p1")
    store.set_global("currentTheme", "dark")
    assert store.list_keys_for_project("p1") == ["reportData", "workDays"]


def test_list_keys_without_project_is_empty(store):
    store.set_global("reportData", 1)
    assert store.list_keys_for_project("") == []


def test_clear_project_isolates(store, backend):
    store.set("reportData", "v", "p1")
    store.set("workDays", "v", "p1")
    store.set("reportData", "v", "p2")
    store.set_global("settings", "v")

    assert store.clear_project("p1") == 2

    assert store.list_keys_for_project("p1") == []
    assert store.get("reportData", None, "p2") == "v"
    assert store.get_global("settings") == "v"


def test_clear_project_refuses_unscoped_namespace(store):
    store.set_global("settings", "v")
    assert store.clear_project("") == 0
    assert store.get_global("settings") == "v"


# -- Export / import -----------------------------------------------------------

def test_export_import_reproduces_project(store):
    store.set("reportData", {"client": "ACME"}, "src")
    store.set("workDays", [{"id": 1}], "src")
    store.set("reportData", {"client": "untouched"}, "other")

    store.import_project(store.export_project("src"), "dst")

    assert store.export_project("dst") == store.export_project("src")
    assert store.get("reportData", None, "other") == {"client": "untouched"}


def test_export_is_a_snapshot(store):
    store.set("reportData", {"client": "a"}, "p1")
    snapshot = store.export_project("p1")
    store.set("reportData", {"client": "b"}, "p1")
    assert snapshot == {"reportData": {"client": "a"}}


def test_export_reports_corrupt_entries_as_none(store, backend):
    backend.set_item("p1_reportData", "{broken")
    assert store.export_project("p1") == {"reportData": None}


def test_import_is_last_write_wins_and_reports_per_key(small_store):
    results = small_store.import_project({"a": 1, "b": "x" * 500})
    assert results == {"a": True, "b": False}
    assert small_store.get("a") == 1


# -- Current project -----------------------------------------------------------

def test_current_project_loaded_from_reserved_key(backend):
    backend.set_item("currentProjectId", "job-1")
    assert ScopedStore(backend).current_project_id == "job-1"


def test_current_project_defaults_to_unscoped(backend):
    assert ScopedStore(backend).current_project_id == ""


def test_set_current_project_persists_raw_id(backend):
    store = ScopedStore(backend)
    assert store.set_current_project_id("job-2") is True
    assert backend.get_item("currentProjectId") == "job-2"
    assert ScopedStore(backend).current_project_id == "job-2"


def test_empty_current_project_not_persisted(backend):
    store = ScopedStore(backend)
    store.set_current_project_id("job-2")
    store.set_current_project_id("")
    assert store.current_project_id == ""
    assert backend.get_item("currentProjectId") == "job-2"


# -- Seeding -------------------------------------------------------------------

def test_seed_project_writes_missing_defaults(store):
    store.set("reportData", {"client": "kept"}, "p1")
    written = store.seed_project("p1", FixedClock(date(2026, 2, 3)))

    assert written == ["equipment", "workDays", "borings", "suppliesData"]
    assert store.get("reportData", None, "p1") == {"client": "kept"}
    assert store.get("workDays", None, "p1")[0]["date"] == "2026-02-03"


def test_seed_project_replaces_corrupt_entries(store, backend):
    backend.set_item("p1_equipment", "{bad")
    assert "equipment" in store.seed_project("p1")
    assert store.get("equipment", None, "p1")["dumpTruck"] == "No"


def test_seed_project_refuses_unscoped_namespace(store, backend, caplog):
    assert store.seed_project("") == []
    assert len(backend) == 0
    assert "without a project id" in caplog.text


def test_seed_project_without_ambient_project_writes_nothing(backend):
    assert ScopedStore(backend).seed_project() == []
    assert backend.keys() == []
