import logging
import random
from typing import Callable, Optional


class ConditionalLogger:
    """
    Rate-limited logger for noisy conditions.

    Each message is emitted with a given probability, so a misbehaving
    upstream cannot flood the logs. The tag is prefixed to every line to
    keep sampled entries searchable.

    Usage:
        UNMATCHED = ConditionalLogger("not_matched_bid", logger)
        UNMATCHED.warn("Bid 'b1' has no corresponding imp in request", 0.01)
    """

    def __init__(self, tag: str, logger: logging.Logger, sampler: Optional[Callable[[], float]] = None):
        self.tag = tag
        self.logger = logger
        self._sampler = sampler or random.random

    def _should_log(self, probability: float) -> bool:
        if probability >= 1.0:
            return True
        if probability <= 0.0:
            return False
        return self._sampler() < probability

    def warn(self, message: str, probability: float) -> bool:
        """Log at WARNING with the given probability. Returns True if emitted."""
        return self._log(logging.WARNING, message, probability)

    def _log(self, level: int, message: str, probability: float) -> bool:
        if not self._should_log(probability):
            return False
        self.logger.log(level, f"[{self.tag}] {message}")
        return True
