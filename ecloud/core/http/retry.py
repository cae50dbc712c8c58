"""
Retry policies for the request executor.

A policy answers three questions for the executor: whether an attempt that
just failed should be retried, how long to wait first, and how many retries
are allowed after the first attempt. Policies are pure: the answer depends
only on the arguments, which keeps retry behaviour reproducible in tests.
"""

import random
from abc import ABC, abstractmethod
from typing import Optional

import httpx


class RetryPolicy(ABC):
    """
    Abstract base class for retry strategies.

    The executor treats a policy as an opaque capability; swap in any
    subclass to change how failures are retried.
    """

    @abstractmethod
    def should_retry(
        self,
        attempt: int,
        error: Optional[Exception],
        response: Optional[httpx.Response]
    ) -> bool:
        """
        Decide whether to retry after a failed attempt.

        Args:
            attempt: Zero-based index of the attempt that just finished
            error: Transport error raised by the attempt, if any
            response: Response received by the attempt, if any

        Returns:
            True if another attempt should be made
        """
        pass

    @abstractmethod
    def backoff(self, attempt: int) -> float:
        """
        Get the delay before the attempt following ``attempt``.

        Returns:
            Delay in seconds
        """
        pass

    @property
    @abstractmethod
    def max_retries(self) -> int:
        """Number of retries allowed after the first attempt."""
        pass


class DefaultRetryPolicy(RetryPolicy):
    """
    Retries transport errors, 5xx responses and 401 responses.

    The 401 case lets the executor retry once a token refresh succeeded.
    Backoff grows quadratically: attempt 0 waits 0s, 1 waits 1s, 2 waits 4s.
    """

    def __init__(self, max_retries: int = 3):
        if max_retries < 0:
            raise ValueError(f"max_retries must be non-negative, got {max_retries}")
        self._max_retries = max_retries

    def should_retry(
        self,
        attempt: int,
        error: Optional[Exception],
        response: Optional[httpx.Response]
    ) -> bool:
        if attempt >= self._max_retries:
            return False

        # Network errors or 5xx status codes
        if error is not None or (response is not None and response.status_code >= 500):
            return True

        # 401 so a refreshed token gets a chance
        if response is not None and response.status_code == 401:
            return True

        return False

    def backoff(self, attempt: int) -> float:
        return float(attempt * attempt)

    @property
    def max_retries(self) -> int:
        return self._max_retries


class ConstantRetryPolicy(DefaultRetryPolicy):
    """Default retry rules with a fixed delay between attempts."""

    def __init__(self, max_retries: int = 3, delay: float = 1.0):
        super().__init__(max_retries)
        self.delay = delay

    def backoff(self, attempt: int) -> float:
        return self.delay


class ExponentialRetryPolicy(DefaultRetryPolicy):
    """
    Default retry rules with capped exponential backoff.

    With jitter enabled the delay is drawn uniformly from [0, computed delay]
    (full jitter), which spreads out retries from many clients.
    """

    def __init__(
        self,
        max_retries: int = 3,
        base_delay: float = 0.5,
        max_delay: float = 30.0,
        jitter: bool = False
    ):
        super().__init__(max_retries)
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.jitter = jitter

    def backoff(self, attempt: int) -> float:
        delay = min(self.max_delay, self.base_delay * (2 ** attempt))
        if self.jitter:
            return random.uniform(0, delay)
        return delay
