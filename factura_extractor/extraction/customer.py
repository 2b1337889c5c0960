"""
Customer-Name Extraction Module.

The least reliable field. Three strategies are tried in order and the
first accepted name wins:

    1. label       text after "titular", "cliente", "señor(a)", ...
    2. geographic  a name-shaped line within two lines of a
                   domicilio / dirección / suministro line
    3. shape       an upper-case line of 2-4 words near the top

Confidence drops with each later strategy.
"""

import re
from typing import Callable, Optional, Tuple

from factura_extractor.config import get_config
from factura_extractor.postprocessor.normalizers import NormalizedText
from factura_extractor.postprocessor.validators import NameValidator
from factura_extractor.utils.helpers import strip_accents
from .candidates import NameCandidate
from .trace import DebugTrace

_NAME_RUN = r"[A-Za-zÁÉÍÓÚÜÑáéíóúüñ][A-Za-zÁÉÍÓÚÜÑáéíóúüñ.' ]{3,60}"

LABEL_PATTERNS = (
    re.compile(
        r"\b(?:titular|cliente|usuario|se[ñn]or\(a\)|sr\(a\)|sr\.?\s*/\s*a|apellido\s+y\s+nombres?|"
        r"nombre|pagador|destinatario)(?![A-Za-zñÑ])"
        r"[ \t]*(?:[:\-][ \t]*\n?|\n)[ \t]*(" + _NAME_RUN + r")",
        re.IGNORECASE
    ),
    re.compile(
        r"(?:datos\s+del\s+cliente|datos\s+del\s+titular)[ \t]*:?[ \t]*\n+[ \t]*(" + _NAME_RUN + r")",
        re.IGNORECASE
    ),
    re.compile(
        r"(" + _NAME_RUN + r")[ \t]*\n+[ \t]*(?:cuit|cuil|dni)\b",
        re.IGNORECASE
    ),
)

# Cut the capture at the first id marker ("JUAN PEREZ CUIT 20-...")
_ID_MARKER = re.compile(r"\b(?:CUIT|CUIL|DNI|NRO|N°|Nº|ID|COD|C\.U\.I\.T)\b.*$", re.IGNORECASE)

GEOGRAPHIC_KEYWORDS = ('domicilio', 'direccion', 'suministro')

_UPPER_SHAPE = re.compile(r"^[A-ZÁÉÍÓÚÜÑ]{2,}(?: [A-ZÁÉÍÓÚÜÑ]{2,}){1,3}$")


class CustomerNameExtractor:
    """
    Priority chain of name strategies.

    Example:
        >>> extractor = CustomerNameExtractor()
        >>> view = TextNormalizer().normalize("Titular: Juan Perez\\nCUIT 20-12345678-9")
        >>> extractor.extract(view, DebugTrace()).value
        "JUAN PEREZ"
    """

    def __init__(self, validator: Optional[NameValidator] = None) -> None:
        self.validator = validator or NameValidator()
        self.label_confidence = get_config("extraction.customer_name.label_confidence", 90)
        self.geographic_confidence = get_config("extraction.customer_name.geographic_confidence", 80)
        self.shape_confidence = get_config("extraction.customer_name.shape_confidence", 65)
        self.geographic_scan_lines = get_config("extraction.customer_name.geographic_scan_lines", 25)
        self.shape_scan_lines = get_config("extraction.customer_name.shape_scan_lines", 15)

        self.strategies: Tuple[Callable[[NormalizedText], Optional[NameCandidate]], ...] = (
            self.from_label,
            self.from_geographic_context,
            self.from_shape,
        )

    def extract(self, normalized: NormalizedText, trace: DebugTrace) -> Optional[NameCandidate]:
        """
        Evaluate strategies in order and stop at the first accepted name.

        Returns:
            The accepted candidate, or None.
        """
        for strategy in self.strategies:
            candidate = strategy(normalized)
            if candidate:
                trace.log(
                    f"Customer name: '{candidate.value}' accepted by {candidate.strategy} strategy"
                )
                return candidate
        trace.log("Customer name: no strategy produced a valid name")
        return None

    def _accept(self, raw: str, position: int, context: str, strategy: str,
                confidence: int) -> Optional[NameCandidate]:
        name = ' '.join(raw.split())
        if not self.validator.is_valid_person_name(name):
            return None
        return NameCandidate(
            raw=raw,
            value=name.upper(),
            position=position,
            context=context,
            score=confidence,
            strategy=strategy,
        )

    def from_label(self, normalized: NormalizedText) -> Optional[NameCandidate]:
        text = normalized.original
        for pattern in LABEL_PATTERNS:
            for match in pattern.finditer(text):
                captured = match.group(1).strip()
                captured = _ID_MARKER.sub('', captured).strip(' .')
                candidate = self._accept(
                    captured, match.start(1), match.group(0), 'label', self.label_confidence
                )
                if candidate:
                    return candidate
        return None

    def from_geographic_context(self, normalized: NormalizedText) -> Optional[NameCandidate]:
        lines = normalized.lines
        for i, line in enumerate(lines[:self.geographic_scan_lines]):
            plain = strip_accents(line.lower())
            if not any(k in plain for k in GEOGRAPHIC_KEYWORDS):
                continue
            for j in range(max(0, i - 2), min(len(lines), i + 3)):
                if j == i:
                    continue
                candidate = self._accept(
                    lines[j], j, line, 'geographic', self.geographic_confidence
                )
                if candidate:
                    return candidate
        return None

    def from_shape(self, normalized: NormalizedText) -> Optional[NameCandidate]:
        for i, line in enumerate(normalized.lines[:self.shape_scan_lines]):
            if not _UPPER_SHAPE.match(line):
                continue
            candidate = self._accept(line, i, line, 'shape', self.shape_confidence)
            if candidate:
                return candidate
        return None
