"""
Timeout-bounded adapter operations.

Driver calls cannot be cancelled mid-flight, so a timeout only abandons
the operation from the caller's side. The operation keeps its own
`with adapter:` scope on the worker thread, which means the adapter is
still disconnected once the driver call eventually returns.
"""
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeout
from typing import Callable, TypeVar

from dbconsole.core.exceptions import QueryTimeoutError
from dbconsole.core.logging_config import get_logger
from dbconsole.database.adapters import DatabaseAdapter

logger = get_logger(__name__)

T = TypeVar("T")


def run_with_timeout(func: Callable[[], T], timeout_seconds: float, operation: str = "Query") -> T:
    """
    Run func on a worker thread, giving up after timeout_seconds.

    Args:
        func: Zero-argument callable
        timeout_seconds: Hard cutoff; no retry
        operation: Label used in the timeout error

    Returns:
        Whatever func returns

    Raises:
        QueryTimeoutError: If the cutoff elapsed first
        Exception: Anything func raised, unchanged
    """
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="db-op")
    future = executor.submit(func)
    try:
        return future.result(timeout=timeout_seconds)
    except FuturesTimeout:
        logger.warning(f"{operation} abandoned after {timeout_seconds:g}s")
        raise QueryTimeoutError(timeout_seconds, operation=operation)
    finally:
        # Never join a stuck driver call
        executor.shutdown(wait=False)


def run_adapter_operation(
    adapter: DatabaseAdapter,
    operation: Callable[[DatabaseAdapter], T],
    timeout_seconds: float,
    label: str = "Query",
) -> T:
    """
    Connect, run operation(adapter), disconnect, within a cutoff.

    The disconnect is guaranteed on success, on failure and after a
    timeout.
    """
    def _scoped() -> T:
        with adapter:
            return operation(adapter)

    return run_with_timeout(_scoped, timeout_seconds, operation=label)
