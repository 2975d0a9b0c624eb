"""
Logging helpers used around command and event dispatch.
"""

import logging
import time
from typing import Optional

from Robespierre.core.logging import get_logger


class LogTimer:
    """
    Context manager that logs how long a block took.

    Example:
        with LogTimer("command ping", logger):
            await code(ctx, message, args)
    """

    def __init__(
        self,
        operation: str,
        logger: Optional[logging.Logger] = None,
        level: int = logging.DEBUG
    ):
        self.operation = operation
        self.logger = logger or get_logger(__name__)
        self.level = level
        self.start_time: Optional[float] = None
        self.duration: Optional[float] = None

    def __enter__(self) -> 'LogTimer':
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.start_time is None:
            return

        self.duration = time.perf_counter() - self.start_time
        if exc_type is not None:
            self.logger.error(
                "%s failed after %.4f seconds: %s",
                self.operation, self.duration, exc_val
            )
        elif self.logger.isEnabledFor(self.level):
            self.logger.log(
                self.level,
                "%s completed in %.4f seconds",
                self.operation, self.duration
            )
