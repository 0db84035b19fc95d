"""
Bounded polling of Compute Engine zone operations.
"""

import logging
import time
from typing import Callable, Optional, TypeVar

from errors import OperationFailed, OperationTimeout, Result
from models import Operation

logger = logging.getLogger(__name__)

T = TypeVar("T")


def retry_until(
    fetch: Callable[[], T],
    predicate: Callable[[T], bool],
    interval_millis: int,
    timeout_millis: int,
    description: str = "condition",
) -> Result[T]:
    """
    Call fetch until its value satisfies predicate or the timeout elapses.

    The first attempt is immediate; attempts are spaced by interval_millis.

    Args:
        fetch: Produces the current value
        predicate: Accepts the value once the wait is over
        interval_millis: Spacing between attempts
        timeout_millis: Maximum total wait
        description: What is being waited for, used in messages

    Returns:
        Result with the accepted value, or an OperationTimeout error
    """
    start = time.monotonic()
    deadline = start + timeout_millis / 1000.0

    while True:
        value = fetch()
        if predicate(value):
            return Result.success(value)

        if time.monotonic() >= deadline:
            elapsed = time.monotonic() - start
            logger.error(f"Timeout waiting for {description} after {elapsed:.0f}s")
            return Result.failure(
                OperationTimeout(
                    f"{description} not reached within {timeout_millis}ms",
                    operation=value if isinstance(value, Operation) else None,
                )
            )

        time.sleep(interval_millis / 1000.0)


class OperationPoller:
    """Waits for zone operations to reach DONE."""

    def __init__(self, operations_api, poll_interval_millis: int, timeout_millis: int):
        """
        Args:
            operations_api: Zone operation API used to re-read operations
            poll_interval_millis: Spacing between status checks
            timeout_millis: Maximum total wait per operation
        """
        self.operations_api = operations_api
        self.poll_interval_millis = poll_interval_millis
        self.timeout_millis = timeout_millis

    def wait(self, operation: Operation) -> Result[Operation]:
        """
        Poll an operation until DONE or until the timeout elapses.

        Args:
            operation: Operation returned by a mutating call

        Returns:
            Result with the DONE operation; OperationTimeout if the timeout
            elapsed first; OperationFailed if DONE carried an error
        """
        last: Optional[Operation] = operation

        def fetch() -> Optional[Operation]:
            nonlocal last
            current = self.operations_api.get(operation.zone, operation.name)
            if current is not None:
                last = current
            return current

        result = retry_until(
            fetch,
            lambda op: op is not None and op.done,
            self.poll_interval_millis,
            self.timeout_millis,
            description=f"operation {operation.name} DONE",
        )
        if not result.ok:
            return Result.failure(
                OperationTimeout(
                    f"operation did not reach DONE state: {last}", operation=last
                )
            )

        done = result.value
        if done.has_error:
            logger.error(
                f"Operation {done.name} FAILED: {done.error_code} {done.error_message}"
            )
            return Result.failure(
                OperationFailed(done.error_code, done.error_message, operation=done)
            )

        logger.debug(f"Operation {done.name} DONE ({done.operation_type})")
        return Result.success(done)
