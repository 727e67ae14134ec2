"""
Reliability utilities.

Circuit breaker for the payment provider and bounded execution for
storage calls. Every external call either completes within its budget
or surfaces as ``DependencyUnavailableError``.
"""

import time
import asyncio
import logging
from typing import Awaitable, Callable, Any, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from courier.app.core.exceptions import DependencyUnavailableError

logger = logging.getLogger("courier.reliability")

T = TypeVar("T")


class CircuitOpenError(Exception):
    pass


class CircuitBreaker:
    """
    Simple Circuit Breaker implementation.
    If 'failure_threshold' consecutive failures occur, the circuit opens and
    rejects calls until 'reset_timeout' seconds have passed, then lets one
    trial call through (HALF_OPEN).
    """
    def __init__(self, failure_threshold: int = 5, reset_timeout: int = 60):
        self.failure_threshold = failure_threshold
        self.reset_timeout = reset_timeout
        self.failures = 0
        self.last_failure_time = 0
        self.state = "CLOSED" # CLOSED, OPEN, HALF_OPEN

    async def call(self, func: Callable, *args, **kwargs) -> Any:
        if self.state == "OPEN":
            if time.time() - self.last_failure_time > self.reset_timeout:
                self.state = "HALF_OPEN"
            else:
                raise CircuitOpenError("Circuit is OPEN")

        try:
            result = await func(*args, **kwargs)
        except Exception:
            self.record_failure()
            raise
        self.reset_state()
        return result

    def record_failure(self):
        self.failures += 1
        self.last_failure_time = time.time()
        if self.state == "HALF_OPEN" or self.failures >= self.failure_threshold:
            self.state = "OPEN"

    def reset_state(self):
        self.failures = 0
        self.state = "CLOSED"


async def run_bounded(awaitable: Awaitable[T], timeout: float, dependency: str = "storage") -> T:
    """
    Await a storage call with a deadline.

    IntegrityError is re-raised untouched so callers can map unique-key
    violations to a conflict; any other driver error or a timeout becomes
    DependencyUnavailableError.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except IntegrityError:
        raise
    except asyncio.TimeoutError as exc:
        logger.error("%s call timed out after %ss", dependency, timeout)
        raise DependencyUnavailableError(dependency, f"{dependency} call timed out") from exc
    except SQLAlchemyError as exc:
        logger.error("%s call failed: %s", dependency, exc, exc_info=True)
        raise DependencyUnavailableError(dependency) from exc
