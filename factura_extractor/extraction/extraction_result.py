"""
Extraction Result Data Class.

This module defines the output of one parse() call: the selected value of
every field, its confidence, ranked alternatives and the debug trace.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import json

from factura_extractor.utils.helpers import format_currency_ars, format_date_ar

FIELD_NAMES = ('amount', 'date', 'barcode', 'provider', 'customerName')


def _empty_confidence() -> Dict[str, int]:
    return {name: 0 for name in FIELD_NAMES}


def _empty_alternatives() -> Dict[str, List[Dict[str, Any]]]:
    return {'amounts': [], 'dates': [], 'barcodes': []}


@dataclass
class ExtractionResult:
    """
    Represents the result of invoice field extraction.

    Any field may be None; a missing field has confidence 0. The instance
    belongs to the caller once returned.

    Attributes:
        amount: Total to pay in pesos
        due_date: Due date as YYYY-MM-DD
        barcode: Digits-only payment barcode
        provider: {"id", "name", "type"} of the issuing company
        customer_name: Upper-case account holder name
        confidence: 0-100 per field (amount, date, barcode, provider, customerName)
        alternatives: Ranked runner-ups for amounts, dates and barcodes
        debug: Ordered trace of extraction decisions
        sources: Per-field origin, "heuristic" or "oracle"
        issuer_cuit: Labeled CUIT found in the text, if any

    Example:
        >>> result = ExtractionResult(amount=15420.5, due_date="2025-01-25")
        >>> result.to_dict()["dueDate"]
        "2025-01-25"
    """
    amount: Optional[float] = None
    due_date: Optional[str] = None
    barcode: Optional[str] = None
    provider: Optional[Dict[str, Any]] = None
    customer_name: Optional[str] = None

    confidence: Dict[str, int] = field(default_factory=_empty_confidence)
    alternatives: Dict[str, List[Dict[str, Any]]] = field(default_factory=_empty_alternatives)
    debug: List[str] = field(default_factory=list)

    sources: Dict[str, Optional[str]] = field(default_factory=dict)
    issuer_cuit: Optional[str] = None

    @property
    def fields(self) -> Dict[str, Any]:
        """Selected values keyed by confidence name."""
        return {
            'amount': self.amount,
            'date': self.due_date,
            'barcode': self.barcode,
            'provider': self.provider,
            'customerName': self.customer_name,
        }

    @property
    def missing_fields(self) -> List[str]:
        return [k for k, v in self.fields.items() if v is None or v == ""]

    def get_confidence(self, field_name: str) -> int:
        return self.confidence.get(field_name, 0)

    def log(self, message: str) -> None:
        """Append a message to the debug trace."""
        self.debug.append(message)

    def to_dict(self, include_formatted: bool = False) -> Dict[str, Any]:
        """
        Convert to the JSON-ready dictionary shape.

        Args:
            include_formatted: Add "amountFormatted" ("$ 15.420,50") and
                "dueDateFormatted" ("25/01/2025") display values.

        Returns:
            Dictionary representation of the extraction result.
        """
        data = {
            'amount': self.amount,
            'dueDate': self.due_date,
            'barcode': self.barcode,
            'provider': dict(self.provider) if self.provider else None,
            'customerName': self.customer_name,
            'confidence': {name: self.confidence.get(name, 0) for name in FIELD_NAMES},
            'alternatives': {k: list(v) for k, v in self.alternatives.items()},
            'debug': list(self.debug),
            'sources': dict(self.sources),
            'issuerCuit': self.issuer_cuit,
        }
        if include_formatted:
            data['amountFormatted'] = format_currency_ars(self.amount)
            data['dueDateFormatted'] = format_date_ar(self.due_date)
        return data

    def to_json(self, indent: int = 2, include_formatted: bool = False) -> str:
        """
        Convert to JSON string.

        Args:
            indent: JSON indentation level.
            include_formatted: See to_dict().

        Returns:
            JSON string representation.
        """
        return json.dumps(
            self.to_dict(include_formatted=include_formatted),
            indent=indent,
            ensure_ascii=False
        )

    def __repr__(self) -> str:
        provider = self.provider['name'] if self.provider else None
        return (
            f"ExtractionResult("
            f"provider={provider}, "
            f"amount={self.amount}, "
            f"due={self.due_date}, "
            f"barcode={'yes' if self.barcode else 'no'})"
        )
