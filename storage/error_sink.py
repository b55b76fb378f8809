"""Error Sink - append-only log of pipeline failures."""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)


def format_error(error: BaseException) -> str:
    message = str(error)
    name = type(error).__name__
    return f"{name}: {message}" if message else name


class ErrorSink:
    """
    Writes one timestamped line per incident. Never raises.

    The append is a single short synchronous write, so callers can
    record from sync and async code alike.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def record(self, context: str, error: BaseException) -> None:
        """
        Log an error and append it to the error file.

        Args:
            context: Where the error happened
            error: The exception
        """
        try:
            detail = format_error(error)
            logger.error(f"Error occurred in {context}: {detail}")

            line = f"{datetime.now(timezone.utc).isoformat()} | {context} | {detail}\n"
            if self.path.parent != Path("."):
                self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(line)
        except Exception as e:
            logger.warning(f"Error writing error logs: {e}")
