from collections import defaultdict
from typing import Dict

from aiolimiter import AsyncLimiter


class SpinRateLimiter:
    """
    Throttles spins per user.

    Each user gets an own AsyncLimiter (`rate` spins per `time_period`
    seconds); requests above the rate wait for capacity instead of failing.
    """

    def __init__(self, rate: int = 5, time_period: float = 1.0):
        self.rate = rate
        self.time_period = time_period
        # user_id → AsyncLimiter
        self.user_limiters: Dict[int, AsyncLimiter] = defaultdict(
            lambda: AsyncLimiter(self.rate, self.time_period)
        )

    def for_user(self, user_id: int) -> AsyncLimiter:
        return self.user_limiters[user_id]
