"""
Debug Trace.

Append-only, per-parse record of why each field was or wasn't selected.
Messages also go to the module logger at DEBUG level.
"""

from typing import List

from factura_extractor.utils.logger import get_logger

logger = get_logger(__name__)


class DebugTrace:
    """Ordered list of human-readable extraction notes."""

    def __init__(self) -> None:
        self.messages: List[str] = []

    def log(self, message: str) -> None:
        self.messages.append(message)
        logger.debug(message)

    def __iter__(self):
        return iter(self.messages)

    def __len__(self) -> int:
        return len(self.messages)
