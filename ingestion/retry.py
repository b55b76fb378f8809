"""Retry policy for network suspension points."""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Tuple, Type, TypeVar

import backoff

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """
    Exponential backoff around an async call.

    With the default ``max_tries=1`` the wrapped call runs exactly once
    and its exception propagates unchanged.
    """

    max_tries: int = 1
    max_time: Optional[float] = None
    retry_on: Tuple[Type[BaseException], ...] = (Exception,)
    max_value: float = 8.0

    @property
    def enabled(self) -> bool:
        return self.max_tries > 1

    def wrap(
        self,
        func: Callable[..., Awaitable[T]],
    ) -> Callable[..., Awaitable[T]]:
        """Return ``func`` decorated with this policy."""
        if not self.enabled:
            return func

        return backoff.on_exception(
            backoff.expo,
            self.retry_on,
            max_tries=self.max_tries,
            max_time=self.max_time,
            max_value=self.max_value,
            on_backoff=lambda details: logger.warning(
                f"Retrying {getattr(details['target'], '__name__', 'call')}... "
                f"attempt {details['tries']}"
            ),
        )(func)


NO_RETRY = RetryPolicy()
