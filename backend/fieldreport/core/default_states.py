"""Default States: canonical starting data for a new field-report project.

Invariants:
    - Every field of every record has a concrete default ('' / False / 'No' / [])
    - Record ids start at 1 within each list
    - The first work day's date is the clock's "today" as YYYY-MM-DD
    - Every call returns fresh deep copies; no mutable sub-object is shared
      between calls or with the module-level templates

Design Decisions:
    - Templates are module-level dicts keyed exactly as persisted (camelCase),
      so a built aggregate can be written to the store as-is
    - Time is read through an injectable Clock; SystemClock reports the UTC date
      (the stored format has always been the UTC calendar day)
"""

import copy
from datetime import date, datetime, timezone
from typing import Protocol

from fieldreport.core.domain_types import AggregateKey


class Clock(Protocol):
    """Source of the current calendar day."""
    def today(self) -> date: ...


class SystemClock:
    """Wall clock, UTC calendar day."""

    def today(self) -> date:
        return datetime.now(timezone.utc).date()


class FixedClock:
    """Clock pinned to one day (imports, tests, replays)."""

    def __init__(self, day: date):
        self._day = day

    def today(self) -> date:
        return self._day


# ─── Templates ───────────────────────────────────────────────────

REPORT_DATA: dict = {
    "client": "",
    "jobName": "",
    "location": "",
    "driller": "",
    "helper": "",
    "perDiem": "",
    "commentsLabor": "",
    "uploadedPhotosDetails": [],
}

EQUIPMENT: dict = {
    "drillRig": "",
    "truck": "",
    "dumpTruck": "No",
    "dumpTruckTimes": "",
    "trailer": "No",
    "coreMachine": False,
    "groutMachine": False,
    "extruder": False,
    "generator": False,
    "decon": False,
}

WORK_DAY: dict = {
    "id": 1,
    "date": "",  # set from the clock at build time
    "timeLeftShop": "",
    "arrivedOnSite": "",
    "timeLeftSite": "",
    "arrivedAtShop": "",
    "hoursDriving": "",
    "hoursOnSite": "",
    "standbyHours": "",
    "standbyMinutes": "",
    "standbyReason": "",
    "pitStopHours": "",
    "pitStopMinutes": "",
    "pitStopReason": "",
    "collapsed": False,
}

BORING: dict = {
    "id": 1,
    "method": "",
    "footage": "",
    "isEnvironmental": False,
    "isGeotechnical": False,
    "washboreSetup": False,
    "washboreFootage": "",
    "casingSetup": False,
    "casingFootage": "",
    "coreSetup": False,
    "coreFootage": "",
    "collapsed": False,
}

# Quantity fields, grouped as on the paper supplies sheet
_SUPPLY_QUANTITY_FIELDS: tuple[str, ...] = (
    # Main table
    "endCaps1", "endCaps2", "endCaps4", "endCapsOther",
    "lockingCaps1", "lockingCaps2", "lockingCaps4", "lockingCapsOther",
    "screen5_1", "screen5_2", "screen5_4", "screen5Other",
    "screen10_1", "screen10_2", "screen10_4", "screen10Other",
    "riser5_1", "riser5_2", "riser5_4", "riser5Other",
    "riser10_1", "riser10_2", "riser10_4", "riser10Other",
    # Other items
    "flushMounts7", "flushMounts8", "flushMountsOther",
    "stickUpCovers4", "stickUpCovers6", "stickUpCoversOther",
    "bollards3", "bollards4", "bollardsOther",
    "concrete50", "concrete60", "concrete80",
    "sand", "drillingMud",
    "bentoniteChips", "bentonitePellets",
    "bentoniteGrout", "portlandGrout",
    "buckets", "shelbyTubes",
    "numCoreBoxes",
    "other",
    "misc",
)

SUPPLIES_DATA: dict = {
    **{name: "" for name in _SUPPLY_QUANTITY_FIELDS},
    "uploadedPhotosSupplies": [],
}


# ─── Builders ────────────────────────────────────────────────────

def format_day(day: date) -> str:
    """ISO calendar day, YYYY-MM-DD."""
    return day.isoformat()


def build_work_day(record_id: int = 1, clock: Clock | None = None) -> dict:
    """New work day dated "today". Reads the clock on every call."""
    record = copy.deepcopy(WORK_DAY)
    record["id"] = record_id
    record["date"] = format_day((clock or SystemClock()).today())
    return record


def build_boring(record_id: int = 1) -> dict:
    """New boring record. Pure."""
    record = copy.deepcopy(BORING)
    record["id"] = record_id
    return record


def build_complete_defaults(clock: Clock | None = None) -> dict:
    """Full aggregate for a new project: one work day and one boring, both id 1."""
    return {
        AggregateKey.REPORT_DATA.value: copy.deepcopy(REPORT_DATA),
        AggregateKey.EQUIPMENT.value: copy.deepcopy(EQUIPMENT),
        AggregateKey.WORK_DAYS.value: [build_work_day(1, clock)],
        AggregateKey.BORINGS.value: [build_boring(1)],
        AggregateKey.SUPPLIES_DATA.value: copy.deepcopy(SUPPLIES_DATA),
    }


def next_record_id(records: list[dict]) -> int:
    """Next sequential id for a work-day or boring list (1 when empty)."""
    ids = [r["id"] for r in records if isinstance(r.get("id"), int)]
    return max(ids, default=0) + 1
