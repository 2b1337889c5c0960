"""
Cross-Validation Post-Processor.

Runs after selection. If both a long barcode and an amount were selected,
a few fixed digit windows of the barcode are read as an amount in cents
and compared with the selected amount. A match raises the amount
confidence; a mismatch changes nothing, since the window layout differs
between providers.
"""

from typing import Optional, Sequence, Tuple

from factura_extractor.config import get_config
from factura_extractor.utils.logger import get_logger

logger = get_logger(__name__)


class CrossValidator:
    """
    Opportunistic barcode/amount consistency check.

    Attributes:
        windows: (offset, length) digit windows read as minor units
        tolerance: Maximum difference in pesos counted as a match
        boost: Confidence points added on a match
        min_barcode_length: Shorter barcodes are not checked

    Example:
        >>> validator = CrossValidator(windows=[(4, 8)])
        >>> validator.find_embedded_amount("0000" + "01542050" + "0" * 32, 15420.50)
        (4, 8)
    """

    def __init__(
        self,
        windows: Optional[Sequence[Sequence[int]]] = None,
        tolerance: Optional[float] = None,
        boost: Optional[int] = None,
        min_barcode_length: Optional[int] = None
    ) -> None:
        self.enabled = get_config("cross_validation.enabled", True)
        raw_windows = windows if windows is not None else get_config(
            "cross_validation.amount_windows", [[19, 8], [20, 8], [32, 8]]
        )
        self.windows: Tuple[Tuple[int, int], ...] = tuple(
            (int(offset), int(length)) for offset, length in raw_windows
        )
        self.tolerance = tolerance if tolerance is not None else get_config(
            "cross_validation.tolerance", 0.05
        )
        self.boost = boost if boost is not None else get_config(
            "cross_validation.confidence_boost", 10
        )
        self.min_barcode_length = min_barcode_length or get_config(
            "cross_validation.min_barcode_length", 23
        )

    def find_embedded_amount(self, barcode: str, amount: float) -> Optional[Tuple[int, int]]:
        """
        Look for the amount, in cents, inside the configured windows.

        Returns:
            The matching (offset, length) window, or None.
        """
        for offset, length in self.windows:
            chunk = barcode[offset:offset + length]
            if len(chunk) != length or not chunk.isdigit():
                continue
            embedded = int(chunk) / 100
            if abs(embedded - amount) <= self.tolerance:
                return offset, length
        return None

    def process(self, result) -> bool:
        """
        Cross-check the selected amount against the selected barcode.

        Only ever increases the amount confidence; never clears a field.

        Args:
            result: ExtractionResult to update in place.

        Returns:
            True if the amount was confirmed by the barcode.
        """
        if not self.enabled or result.amount is None or not result.barcode:
            return False
        if len(result.barcode) < self.min_barcode_length:
            return False

        window = self.find_embedded_amount(result.barcode, result.amount)
        if window is None:
            result.log("Cross-check: amount not found in barcode (no change)")
            return False

        before = result.confidence.get('amount', 0)
        result.confidence['amount'] = min(100, before + self.boost)
        result.log(
            f"Cross-check: amount {result.amount} found in barcode at offset {window[0]}, "
            f"confidence {before} -> {result.confidence['amount']}"
        )
        logger.debug(f"Amount confirmed by barcode window {window}")
        return True
