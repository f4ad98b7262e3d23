"""
Safe-zero input guard shared by the projection engines.

Degenerate requests (non-positive principal, horizon, ages out of order...)
are answered with a fully populated all-zero result instead of an error.
"""

import functools
import logging
from typing import Callable, TypeVar

logger = logging.getLogger(__name__)

R = TypeVar("R")
T = TypeVar("T")


def zero_on_invalid(
    validator: Callable[[R], bool], empty_result: Callable[[R], T]
) -> Callable[[Callable[[R], T]], Callable[[R], T]]:
    """
    Decorate an engine entry point taking a single request object.

    Args:
        validator: Returns True when the request can be computed
        empty_result: Builds the all-zero result for a rejected request

    Returns:
        Decorator that short-circuits to ``empty_result(request)``
    """

    def decorator(func: Callable[[R], T]) -> Callable[[R], T]:
        @functools.wraps(func)
        def wrapper(request: R) -> T:
            if not validator(request):
                logger.warning(
                    "%s: degenerate input, returning empty result: %r",
                    func.__name__,
                    request,
                )
                return empty_result(request)
            return func(request)

        return wrapper

    return decorator
