"""Domain Types: identity wrappers, enum members and configuration defaults.

Tests:
    - NewType wrappers are plain str at runtime
    - Enums serialize to their string values
    - Settings default to the plain key scheme and the 5 MiB quota
"""

from fieldreport.config import Settings
from fieldreport.core.domain_types import (
    AggregateKey, ImportMode, KeyScheme, LogicalKey, PhysicalKey, ProjectId,
    ReadOutcome, WriteOutcome,
)


def test_identity_types_wrap_str():
    assert ProjectId("p1") == "p1"
    assert LogicalKey("reportData") == "reportData"
    assert PhysicalKey("p1_reportData") == "p1_reportData"


def test_aggregate_keys():
    assert [k.value for k in AggregateKey] == [
        "reportData", "equipment", "workDays", "borings", "suppliesData",
    ]


def test_enums_are_str():
    assert KeyScheme("escaped") is KeyScheme.ESCAPED
    assert ImportMode.MERGE == "merge"
    assert ReadOutcome.CORRUPT.value == "corrupt"
    assert WriteOutcome.QUOTA_EXCEEDED.value == "quota_exceeded"


def test_settings_defaults(monkeypatch):
    monkeypatch.delenv("KEY_SCHEME", raising=False)
    settings = Settings(_env_file=None)
    assert settings.key_scheme == KeyScheme.PLAIN
    assert settings.storage_quota_bytes == 5 * 1024 * 1024
    assert settings.current_project_key == "currentProjectId"


def test_settings_rewrites_postgres_scheme():
    settings = Settings(database_url="postgres://u:p@host/db", _env_file=None)
    assert settings.database_url == "postgresql://u:p@host/db"


def test_settings_reads_key_scheme_from_env(monkeypatch):
    monkeypatch.setenv("KEY_SCHEME", "escaped")
    assert Settings(_env_file=None).key_scheme == KeyScheme.ESCAPED
