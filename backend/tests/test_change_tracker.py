"""Tests for field-level change tracking."""
from datetime import datetime, timedelta, timezone

import pytz

from tzevents.services.candidate import EventCandidate, TRACKED_FIELDS
from tzevents.services.change_tracker import diff, snapshot

NOW = datetime(2024, 6, 2, 12, 0, tzinfo=timezone.utc)
START = datetime(2024, 6, 1, 13, 0, tzinfo=timezone.utc)

BASE = EventCandidate(
    title="Planning",
    description="Quarterly planning",
    profiles=("p1", "p2"),
    timezone="America/New_York",
    start_date_time=START,
    end_date_time=START + timedelta(hours=1),
)


class TestDiff:

    def test_identical_produces_nothing(self):
        assert diff(BASE, BASE, "actor", NOW) == []

    def test_identical_mapping_produces_nothing(self):
        assert diff(BASE, BASE.tracked_values(), "actor", NOW) == []

    def test_single_field(self):
        entries = diff(BASE, {"title": "Roadmap"}, "actor", NOW)
        assert len(entries) == 1
        entry = entries[0]
        assert entry.field == "title"
        assert entry.old_value == "Planning"
        assert entry.new_value == "Roadmap"
        assert entry.updated_at == NOW
        assert entry.updated_by == "actor"

    def test_unchanged_fields_present_are_ignored(self):
        proposed = {"title": "Planning", "timezone": "America/New_York", "description": "New text"}
        entries = diff(BASE, proposed, "actor", NOW)
        assert [e.field for e in entries] == ["description"]

    def test_fixed_field_order(self):
        proposed = {
            "profiles": ["p3"],
            "timezone": "Europe/Paris",
            "endDateTime": START + timedelta(hours=2),
            "title": "Renamed",
        }
        entries = diff(BASE, proposed, None, NOW)
        assert [e.field for e in entries] == ["title", "endDateTime", "timezone", "profiles"]
        assert [e.field for e in entries] == [f for f in TRACKED_FIELDS if f in proposed]

    def test_profiles_structural_equality(self):
        assert diff(BASE, {"profiles": ["p1", "p2"]}, None, NOW) == []

    def test_profiles_reordered_is_a_change(self):
        entries = diff(BASE, {"profiles": ["p2", "p1"]}, None, NOW)
        assert entries[0].old_value == ["p1", "p2"]
        assert entries[0].new_value == ["p2", "p1"]

    def test_same_instant_different_offset_is_no_change(self):
        tokyo = START.astimezone(pytz.timezone("Asia/Tokyo"))
        assert diff(BASE, {"startDateTime": tokyo}, None, NOW) == []

    def test_instant_snapshots_are_utc_strings(self):
        entries = diff(BASE, {"startDateTime": START + timedelta(minutes=15)}, None, NOW)
        assert entries[0].old_value == "2024-06-01T13:00:00Z"
        assert entries[0].new_value == "2024-06-01T13:15:00Z"

    def test_missing_actor_still_recorded(self):
        entries = diff(BASE, {"title": "Other"}, None, NOW)
        assert len(entries) == 1
        assert entries[0].updated_by is None

    def test_untracked_fields_ignored(self):
        assert diff(BASE, {"color": "red", "createdBy": "x"}, "actor", NOW) == []

    def test_clearing_description(self):
        entries = diff(BASE, {"description": None}, "actor", NOW)
        assert entries[0].old_value == "Quarterly planning"
        assert entries[0].new_value is None


class TestSnapshot:

    def test_profiles_become_list(self):
        assert snapshot("profiles", ("a", "b")) == ["a", "b"]

    def test_none(self):
        assert snapshot("title", None) is None
