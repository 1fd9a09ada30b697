# FILETIME: 100-nanosecond ticks since 1601-01-01 UTC.
TICKS_PER_SECOND = 10_000_000
EPOCH_DELTA_SECONDS = 11_644_473_600  # 1601-01-01 -> 1970-01-01


def filetime_to_unix_seconds(ticks: int) -> int:
    """
    Convert a FILETIME tick count to whole Unix seconds.

    0 means "unknown" on the wire and maps to 0. Times before the Unix epoch
    clamp to 0 as well.
    """
    if ticks <= 0:
        return 0
    seconds = ticks // TICKS_PER_SECOND
    return max(0, seconds - EPOCH_DELTA_SECONDS)


def unix_seconds_to_filetime(seconds: int) -> int:
    return (seconds + EPOCH_DELTA_SECONDS) * TICKS_PER_SECOND
