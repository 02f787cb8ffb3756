"""Key Codec: physical storage keys from (project id, logical key) pairs.

Invariants:
    - derive_key is PURE and deterministic in (logical_key, project_id, scheme)
    - Empty / None project id returns the logical key unchanged (global namespace)
    - strip_prefix(derive_key(k, p), p) == k for every scheme
    - Under ESCAPED, distinct (project_id, logical_key) pairs never share a physical key

Design Decisions:
    - PLAIN ("<projectId>_<logicalKey>") is the default: it is the layout existing
      areas and backups use, and their project ids ("project_<timestamp>") always
      contain "_". Under PLAIN a project "a" also claims the keys of a project "a_b"
    - ESCAPED is opt-in for fresh areas. It cannot read PLAIN data whose project
      ids contain "_"; switching an existing area needs a key migration
    - Only the project id is escaped; the first unescaped "_" is always the separator,
      so logical keys may contain "_" freely
"""

from dataclasses import dataclass

from fieldreport.core.domain_types import KeyScheme

SEPARATOR = "_"
ESCAPE = "\\"


def escape_project_id(project_id: str) -> str:
    """Escape the escape char first, then the separator."""
    return project_id.replace(ESCAPE, ESCAPE * 2).replace(
        SEPARATOR, ESCAPE + SEPARATOR,
    )


def project_prefix(
    project_id: str | None, scheme: KeyScheme = KeyScheme.PLAIN,
) -> str:
    """Prefix shared by every physical key of a project ("" when unscoped)."""
    if not project_id:
        return ""
    if scheme == KeyScheme.ESCAPED:
        return escape_project_id(project_id) + SEPARATOR
    return project_id + SEPARATOR


def derive_key(
    logical_key: str,
    project_id: str | None,
    scheme: KeyScheme = KeyScheme.PLAIN,
) -> str:
    """Physical key for logical_key under project_id."""
    return project_prefix(project_id, scheme) + logical_key


def strip_prefix(
    physical_key: str,
    project_id: str | None,
    scheme: KeyScheme = KeyScheme.PLAIN,
) -> str:
    """Inverse of derive_key. Raises ValueError if the key is not in the project."""
    prefix = project_prefix(project_id, scheme)
    if not physical_key.startswith(prefix):
        raise ValueError(
            f"Key {physical_key!r} does not belong to project {project_id!r}",
        )
    return physical_key[len(prefix):]


@dataclass(frozen=True)
class KeyCodec:
    """Scheme-bound codec handed to ScopedStore."""
    scheme: KeyScheme = KeyScheme.PLAIN

    def derive(self, logical_key: str, project_id: str | None) -> str:
        return derive_key(logical_key, project_id, self.scheme)

    def strip(self, physical_key: str, project_id: str | None) -> str:
        return strip_prefix(physical_key, project_id, self.scheme)

    def prefix(self, project_id: str | None) -> str:
        return project_prefix(project_id, self.scheme)

    def belongs_to(self, physical_key: str, project_id: str | None) -> bool:
        """True when physical_key lives under project_id's prefix."""
        prefix = self.prefix(project_id)
        return bool(prefix) and physical_key.startswith(prefix)
