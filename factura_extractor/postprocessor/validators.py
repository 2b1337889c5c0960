"""
Data Validators Module.

This module provides validation functions for:
    - Due dates (rolling year window relative to the parse time)
    - Barcodes (length-derived priority tiers)
    - Customer names (shape rules + blacklist)
"""

import re
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional, Tuple

from factura_extractor.config import get_config
from factura_extractor.utils.helpers import digits_only, strip_accents
from factura_extractor.utils.logger import get_logger

logger = get_logger(__name__)


class DateValidator:
    """
    Validates candidate due dates against a rolling year window.

    The window is [reference.year - years_back, reference.year + years_ahead],
    where the reference is "today" at call time unless one is passed in.

    Example:
        >>> validator = DateValidator()
        >>> validator.validate(date(2025, 1, 25), reference=date(2026, 3, 1))
        (True, "Valid date")
    """

    def __init__(
        self,
        years_back: Optional[int] = None,
        years_ahead: Optional[int] = None
    ) -> None:
        self.years_back = years_back if years_back is not None else get_config(
            "extraction.dates.years_back", 1
        )
        self.years_ahead = years_ahead if years_ahead is not None else get_config(
            "extraction.dates.years_ahead", 2
        )

    def year_window(self, reference: Optional[date] = None) -> Tuple[int, int]:
        """Return the (first, last) accepted year for a reference date."""
        reference = reference or date.today()
        return reference.year - self.years_back, reference.year + self.years_ahead

    def validate(
        self,
        candidate: Optional[date],
        reference: Optional[date] = None
    ) -> Tuple[bool, str]:
        """
        Validate a calendar date with detailed feedback.

        Args:
            candidate: Built date, or None when the parts were impossible.
            reference: Date the window is anchored to (defaults to today).

        Returns:
            Tuple of (is_valid, message).
        """
        if candidate is None:
            return False, "Not a calendar date"

        first, last = self.year_window(reference)
        if candidate.year < first:
            return False, f"Year {candidate.year} is too old"
        if candidate.year > last:
            return False, f"Year {candidate.year} is too far in future"

        return True, "Valid date"

    def is_valid(self, candidate: Optional[date], reference: Optional[date] = None) -> bool:
        valid, _ = self.validate(candidate, reference)
        return valid


# =============================================================================
# BARCODES
# =============================================================================

# Tier name -> priority. Higher priority always wins over context.
BARCODE_TIERS = {
    'interbank': 100,
    'service': 80,
    'electronic_payment': 60,
    'cbu': 40,
    'numeric_code': 20,
}

# Context that turns an ambiguous 22-digit run into a payment code
PAYMENT_SIGNALS = (
    'pago electr', 'codigo de pago', 'cod. de pago', 'cod de pago',
    'pmc', 'pagomiscuentas', 'pago mis cuentas', 'interbanking',
    'link pagos', 'red link',
)


@dataclass(frozen=True)
class BarcodeValidation:
    """
    Result of validate_barcode().

    Attributes:
        valid: Whether the code is within the accepted length bounds
        cleaned: Digits-only code
        length: Number of digits
        type: Tier name (see BARCODE_TIERS) or None if invalid
        priority: Tier priority, 0 if invalid
        reason: Explanation when invalid
    """
    valid: bool
    cleaned: str = ""
    length: int = 0
    type: Optional[str] = None
    priority: int = 0
    reason: Optional[str] = None


def classify_barcode_length(length: int, context: str = "") -> str:
    """
    Classify a digit count into a priority tier.

    40-60 digits is the interbank electronic-payment code, 23-39 a service
    invoice barcode and 19-22 a short electronic-payment code. Exactly 22
    digits is a CBU unless the context carries a payment signal.
    """
    if 40 <= length <= 60:
        return 'interbank'
    if 23 <= length <= 39:
        return 'service'
    if length == 22:
        plain = strip_accents(context.lower())
        if any(signal in plain for signal in PAYMENT_SIGNALS) and 'cbu' not in plain:
            return 'electronic_payment'
        return 'cbu'
    if 19 <= length <= 21:
        return 'electronic_payment'
    return 'numeric_code'


def validate_barcode(
    code: Optional[str],
    context: str = "",
    min_length: Optional[int] = None,
    max_length: Optional[int] = None
) -> BarcodeValidation:
    """
    Validate and classify a possible payment barcode.

    Args:
        code: Raw code; non-digits (spaces, dashes) are removed.
        context: Text around the code, used only to disambiguate 22 digits.
        min_length: Shortest accepted code (default 10).
        max_length: Longest accepted code (default 65).

    Returns:
        BarcodeValidation.

    Example:
        >>> validate_barcode("0" * 44).type
        "interbank"
        >>> validate_barcode("1" * 22).type
        "cbu"
    """
    if not code or not isinstance(code, str):
        return BarcodeValidation(valid=False, reason="Empty or non-string code")

    min_length = min_length or get_config("extraction.barcode.min_length", 10)
    max_length = max_length or get_config("extraction.barcode.max_length", 65)

    cleaned = digits_only(code)
    length = len(cleaned)

    if length < min_length:
        return BarcodeValidation(False, cleaned, length, reason="Code too short")
    if length > max_length:
        return BarcodeValidation(False, cleaned, length, reason="Code too long")

    tier = classify_barcode_length(length, context)
    return BarcodeValidation(
        valid=True,
        cleaned=cleaned,
        length=length,
        type=tier,
        priority=BARCODE_TIERS[tier]
    )


# =============================================================================
# CUSTOMER NAMES
# =============================================================================

NAME_BLACKLIST = (
    # Providers
    'EDENOR', 'EDESUR', 'METROGAS', 'NATURGY', 'AYSA', 'TELECOM', 'PERSONAL',
    'FLOW', 'MOVISTAR', 'TELEFONICA', 'CLARO', 'FIBERTEL', 'TELECENTRO',
    'DIRECTV', 'CAMUZZI', 'SCPL', 'OSDE', 'GALENO', 'SWISS MEDICAL',
    'CABLEVISION', 'EMPRESA', 'DISTRIBUIDORA', 'COOPERATIVA', 'GAS',
    # Legal entity suffixes
    'S.A.', 'SA', 'S.A', 'SAU', 'S.A.U.', 'SRL', 'S.R.L.', 'INC', 'LTDA',
    'LIMITADA', 'SOCIEDAD', 'ANONIMA',
    # Invoice jargon
    'CUIT', 'CUIL', 'DNI', 'FACTURA', 'LIQUIDACION', 'CONSUMO', 'TOTAL',
    'PAGO', 'PAGAR', 'VENCE', 'VENCIMIENTO', 'CLIENTE', 'TITULAR', 'USUARIO',
    'SUMINISTRO', 'DIRECCION', 'DOMICILIO', 'ESTADO', 'PERIODO', 'MES', 'ANO',
    'FECHA', 'EMISION', 'NUMERO', 'NRO', 'CALLE', 'PROVINCIA', 'LOCALIDAD',
    'RESPONSABLE', 'INSCRIPTO', 'MONOTRIBUTO', 'EXENTO', 'IVA', 'IMPORTE',
    'MONTO', 'SALDO', 'CODIGO', 'BARRAS', 'SERVICIO', 'SERVICIOS', 'CARGO',
    'CARGOS', 'TARIFA', 'MEDIDOR', 'LECTURA', 'RESUMEN', 'CUENTA', 'DETALLE',
    'CONDICION', 'CONSUMIDOR', 'FINAL', 'ORIGINAL', 'DUPLICADO', 'HOJA',
    'CAPITAL', 'FEDERAL', 'BUENOS', 'AIRES', 'ARGENTINA', 'REPUBLICA',
)

_NAME_CHARS = re.compile(r"^[A-Za-zÁÉÍÓÚÜÑáéíóúüñ][A-Za-zÁÉÍÓÚÜÑáéíóúüñ.' \-]*$")


class NameValidator:
    """
    Decides whether a string looks like a person's name.

    A name must be 5-45 characters long, digit-free, contain at least one
    space, have 2-5 tokens of at least two letters, and must not equal,
    start with, or end with a blacklisted token.

    Example:
        >>> NameValidator().is_valid_person_name("JUAN CARLOS PEREZ")
        True
        >>> NameValidator().is_valid_person_name("EDENOR DISTRIBUIDORA S.A.")
        False
    """

    MIN_LENGTH = 5
    MAX_LENGTH = 45
    MIN_TOKENS = 2
    MAX_TOKENS = 5

    def __init__(self, blacklist: Optional[Iterable[str]] = None) -> None:
        words = blacklist if blacklist is not None else NAME_BLACKLIST
        self.blacklist = tuple(strip_accents(w).upper() for w in words)

    def validate(self, name: Optional[str]) -> Tuple[bool, str]:
        """
        Validate a candidate name with detailed feedback.

        Returns:
            Tuple of (is_valid, message).
        """
        if not name:
            return False, "Name is empty"

        name = ' '.join(name.split())

        if not self.MIN_LENGTH <= len(name) <= self.MAX_LENGTH:
            return False, f"Length {len(name)} outside [{self.MIN_LENGTH}, {self.MAX_LENGTH}]"
        if re.search(r'\d', name):
            return False, "Contains digits"
        if ' ' not in name:
            return False, "Single word"
        if not _NAME_CHARS.match(name):
            return False, "Unexpected characters"

        tokens = name.split(' ')
        if not self.MIN_TOKENS <= len(tokens) <= self.MAX_TOKENS:
            return False, f"{len(tokens)} tokens"
        if any(len(re.sub(r"[^\w]", '', t)) < 2 for t in tokens):
            return False, "Token shorter than two letters"

        upper = strip_accents(name).upper()
        for word in self.blacklist:
            if upper == word or upper.startswith(word + ' ') or upper.endswith(' ' + word):
                return False, f"Blacklisted token: {word}"

        return True, "Valid name"

    def is_valid_person_name(self, name: Optional[str]) -> bool:
        valid, _ = self.validate(name)
        return valid
