"""
Retry helpers.

The delay sequence is a pure function so it can be unit tested without waiting; callers do the
actual wait with `asyncio.sleep`, which stays cancellable.
"""

from typing import List


def backoff_delays(retries: int, base_delay_ms: int) -> List[float]:
    """
    Compute exponential backoff delays (seconds) between `retries` attempts.

    The delay before attempt *k* (k >= 2) is `base_delay_ms * 2 ** (k - 2)` milliseconds, so
    `backoff_delays(3, 500)` is `[0.5, 1.0]`: 500ms before the second attempt, 1000ms before
    the third.

    Args:
        retries: Total number of attempts, including the first one.
        base_delay_ms: Delay before the second attempt, in milliseconds.

    Returns:
        List[float]: `retries - 1` delays in seconds (empty for a single attempt).

    Raises:
        ValueError: If `retries` is lower than 1 or `base_delay_ms` is negative.
    """
    if retries < 1:
        raise ValueError("retries must be at least 1")
    if base_delay_ms < 0:
        raise ValueError("base_delay_ms must not be negative")
    return [base_delay_ms * 2 ** (attempt - 2) / 1000 for attempt in range(2, retries + 1)]
