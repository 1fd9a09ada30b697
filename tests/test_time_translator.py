"""
Tests for FILETIME to Unix seconds conversion.
"""

from share_agent.smb.time_translator import (
    EPOCH_DELTA_SECONDS,
    TICKS_PER_SECOND,
    filetime_to_unix_seconds,
    unix_seconds_to_filetime,
)


class TestFiletimeToUnixSeconds:
    def test_zero_is_unknown(self):
        assert filetime_to_unix_seconds(0) == 0

    def test_negative_is_unknown(self):
        assert filetime_to_unix_seconds(-5) == 0

    def test_unix_epoch(self):
        assert filetime_to_unix_seconds(116444736000000000) == 0

    def test_known_timestamp(self):
        """2020-01-01T00:00:00Z."""
        assert filetime_to_unix_seconds(132223104000000000) == 1577836800

    def test_sub_second_ticks_truncate(self):
        ticks = unix_seconds_to_filetime(1577836800) + TICKS_PER_SECOND - 1
        assert filetime_to_unix_seconds(ticks) == 1577836800

    def test_before_unix_epoch_clamps_to_zero(self):
        """1601..1970 cannot be represented as unsigned Unix seconds."""
        assert filetime_to_unix_seconds(TICKS_PER_SECOND) == 0
        assert filetime_to_unix_seconds((EPOCH_DELTA_SECONDS - 1) * TICKS_PER_SECOND) == 0


class TestUnixSecondsToFiletime:
    def test_inverse_of_conversion(self):
        for seconds in (0, 1, 1577836800, 4102444800):
            assert filetime_to_unix_seconds(unix_seconds_to_filetime(seconds)) == seconds
