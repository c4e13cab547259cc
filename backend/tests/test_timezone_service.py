"""Tests for wall-clock <-> instant conversion, including DST edges."""
from datetime import datetime, timezone

import pytest

from tzevents.errors import InvalidDateTime, InvalidTimezone
from tzevents.services import timezone_service as tzs


def _utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


class TestToInstant:

    def test_standard_time(self):
        assert tzs.to_instant("2024-01-15T09:00", "America/New_York") == _utc(2024, 1, 15, 14, 0)

    def test_half_hour_zone(self):
        assert tzs.to_instant("2024-01-01T09:00", "Asia/Kolkata") == _utc(2024, 1, 1, 3, 30)

    def test_utc_zone(self):
        assert tzs.to_instant("2024-05-05T12:34:56", "UTC") == _utc(2024, 5, 5, 12, 34, 56)

    def test_result_is_aware_utc(self):
        instant = tzs.to_instant("2024-07-01T08:00", "Europe/Paris")
        assert instant.tzinfo is not None
        assert instant.utcoffset().total_seconds() == 0
        assert instant == _utc(2024, 7, 1, 6, 0)

    def test_spring_forward_valid_times_around_gap(self):
        """2024-03-10 America/New_York jumps 02:00 -> 03:00."""
        start = tzs.to_instant("2024-03-10T01:30", "America/New_York")
        end = tzs.to_instant("2024-03-10T03:30", "America/New_York")
        assert start == _utc(2024, 3, 10, 6, 30)  # EST, -05:00
        assert end == _utc(2024, 3, 10, 7, 30)    # EDT, -04:00
        assert (end - start).total_seconds() == 3600

    def test_nonexistent_time_moves_forward_past_gap(self):
        instant = tzs.to_instant("2024-03-10T02:30", "America/New_York")
        assert instant >= _utc(2024, 3, 10, 7, 0)  # 03:00 EDT
        assert tzs.to_local(instant, "America/New_York") == "2024-03-10T03:30"

    def test_nonexistent_start_of_gap(self):
        instant = tzs.to_instant("2024-03-10T02:00", "America/New_York")
        assert instant == _utc(2024, 3, 10, 7, 0)
        assert tzs.to_local(instant, "America/New_York") == "2024-03-10T03:00"

    def test_ambiguous_fall_back_takes_later_instant(self):
        """01:30 happens twice on 2024-11-03 in New York; the EST one wins."""
        instant = tzs.to_instant("2024-11-03T01:30", "America/New_York")
        assert instant == _utc(2024, 11, 3, 6, 30)

    def test_southern_hemisphere_gap(self):
        # Sydney springs forward 02:00 -> 03:00 on 2024-10-06
        instant = tzs.to_instant("2024-10-06T02:30", "Australia/Sydney")
        assert tzs.to_local(instant, "Australia/Sydney") == "2024-10-06T03:30"

    def test_offset_string_is_absolute(self):
        """Values with an explicit offset ignore the zone for interpretation."""
        assert tzs.to_instant("2024-03-10T06:30:00Z", "Asia/Tokyo") == _utc(2024, 3, 10, 6, 30)
        assert tzs.to_instant("2024-03-10T12:00:00+05:30", "UTC") == _utc(2024, 3, 10, 6, 30)

    def test_date_only_is_midnight(self):
        assert tzs.to_instant("2024-03-10", "UTC") == _utc(2024, 3, 10, 0, 0)

    def test_datetime_object_accepted(self):
        assert tzs.to_instant(datetime(2024, 1, 15, 9, 0), "America/New_York") == _utc(2024, 1, 15, 14, 0)

    @pytest.mark.parametrize("zone", ["Mars/Olympus", "", None, "   "])
    def test_invalid_timezone(self, zone):
        with pytest.raises(InvalidTimezone):
            tzs.to_instant("2024-01-01T00:00", zone)

    @pytest.mark.parametrize("value", ["not-a-date", "2024-13-01T00:00", "", None, 12345])
    def test_invalid_datetime(self, value):
        with pytest.raises(InvalidDateTime):
            tzs.to_instant(value, "UTC")

    def test_invalid_datetime_carries_field(self):
        with pytest.raises(InvalidDateTime) as excinfo:
            tzs.to_instant("garbage", "UTC", field="startDateTime")
        assert excinfo.value.errors[0].field == "startDateTime"


class TestToLocal:

    @pytest.mark.parametrize("wall_clock,zone", [
        ("2024-01-15T09:00", "America/New_York"),
        ("2024-07-04T18:45", "America/Los_Angeles"),
        ("2024-03-10T01:30", "America/New_York"),
        ("2024-03-10T03:30", "America/New_York"),
        ("2024-12-31T23:59", "Pacific/Auckland"),
        ("2024-02-29T12:00", "Asia/Kolkata"),
        ("2024-06-01T12:00:30", "Europe/London"),
    ])
    def test_round_trip(self, wall_clock, zone):
        assert tzs.to_local(tzs.to_instant(wall_clock, zone), zone) == wall_clock

    def test_renders_in_other_zone(self):
        instant = _utc(2024, 6, 1, 13, 0)
        assert tzs.to_local(instant, "Asia/Tokyo") == "2024-06-01T22:00"
        assert tzs.to_local(instant, "America/New_York") == "2024-06-01T09:00"

    def test_naive_instant_treated_as_utc(self):
        assert tzs.to_local(datetime(2024, 6, 1, 13, 0), "UTC") == "2024-06-01T13:00"

    def test_invalid_timezone(self):
        with pytest.raises(InvalidTimezone):
            tzs.to_local(_utc(2024, 1, 1), "Nowhere/Land")


class TestOffsets:

    def test_positive_half_hour(self):
        assert tzs.offset_of("Asia/Kolkata", _utc(2024, 1, 1)) == "+05:30"

    def test_negative_half_hour(self):
        assert tzs.offset_of("America/St_Johns", _utc(2024, 1, 15)) == "-03:30"

    def test_dst_dependent(self):
        assert tzs.offset_of("America/New_York", _utc(2024, 1, 15)) == "-05:00"
        assert tzs.offset_of("America/New_York", _utc(2024, 7, 15)) == "-04:00"

    def test_utc(self):
        assert tzs.offset_of("UTC", _utc(2024, 1, 1)) == "+00:00"

    def test_invalid(self):
        with pytest.raises(InvalidTimezone):
            tzs.offset_of("Bad/Zone")

    def test_list_common(self):
        zones = tzs.list_timezones(at=_utc(2024, 1, 15))
        by_name = {z["timezone"]: z["offset"] for z in zones}
        assert by_name["UTC"] == "+00:00"
        assert by_name["Asia/Kolkata"] == "+05:30"
        assert by_name["America/New_York"] == "-05:00"
        assert len(zones) == len(tzs.COMMON_TIMEZONES)

    def test_list_all_is_larger(self):
        assert len(tzs.list_timezones(common_only=False)) > len(tzs.COMMON_TIMEZONES)


class TestTimezoneChecks:

    def test_is_valid(self):
        assert tzs.is_valid_timezone("Europe/Berlin")
        assert not tzs.is_valid_timezone("Europe/Atlantis")
        assert not tzs.is_valid_timezone(None)

    def test_ensure_strips(self):
        assert tzs.ensure_timezone("  Europe/Berlin ") == "Europe/Berlin"
