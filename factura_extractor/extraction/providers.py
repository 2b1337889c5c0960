"""
Provider Detection Module.

Identifies the utility company that issued the invoice by matching a
static, ordered table of lower-case patterns against the normalized text.

Table order is significant: the first pattern found wins, so a provider
listed earlier beats a later one when both appear. The default order is:

    camuzzi, scpl, metrogas, naturgy, telecom, movistar, claro, aysa,
    edenor, edesur, telecentro, fibertel, directv, osde, swiss_medical,
    galeno

"personal" and "flow" belong to Telecom and sit ahead of every provider
after it, which means any text mentioning "personal" is attributed to
Telecom unless an earlier provider matched first.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

from factura_extractor.config import get_config
from factura_extractor.utils.logger import get_logger
from factura_extractor.postprocessor.normalizers import NormalizedText

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProviderRecord:
    """
    Static provider configuration.

    Attributes:
        id: Short identifier, also searched in the header lines
        name: Display name
        patterns: Lower-case substrings that identify the provider
        type: Service type tag (electricity, gas, water, telecom, ...)
    """
    id: str
    name: str
    patterns: Tuple[str, ...]
    type: str

    def to_dict(self) -> Dict[str, str]:
        return {'id': self.id, 'name': self.name, 'type': self.type}


DEFAULT_PROVIDERS: Tuple[ProviderRecord, ...] = (
    ProviderRecord('camuzzi', 'Camuzzi', ('camuzzi', 'gas pampeana', 'gas del sur'), 'gas'),
    ProviderRecord('scpl', 'SCPL', ('scpl', 'sociedad cooperativa popular limitada'), 'service'),
    ProviderRecord('metrogas', 'Metrogas', ('metrogas',), 'gas'),
    ProviderRecord('naturgy', 'Naturgy', ('naturgy', 'gas natural ban'), 'gas'),
    ProviderRecord('telecom', 'Telecom / Personal', ('telecom', 'personal', 'flow'), 'telecom'),
    ProviderRecord('movistar', 'Movistar', ('movistar', 'telefónica', 'telefonica'), 'telecom'),
    ProviderRecord('claro', 'Claro', ('claro', 'amx argentina'), 'telecom'),
    ProviderRecord('aysa', 'AySA', ('aysa', 'agua y saneamientos argentinos'), 'water'),
    ProviderRecord('edenor', 'Edenor', ('edenor', 'empresa distribuidora norte'), 'electricity'),
    ProviderRecord('edesur', 'Edesur', ('edesur', 'empresa distribuidora sur'), 'electricity'),
    ProviderRecord('telecentro', 'Telecentro', ('telecentro',), 'internet'),
    ProviderRecord('fibertel', 'Fibertel', ('fibertel', 'cablevision'), 'internet'),
    ProviderRecord('directv', 'DirecTV', ('directv',), 'cable'),
    ProviderRecord('osde', 'OSDE', ('osde',), 'health'),
    ProviderRecord('swiss_medical', 'Swiss Medical', ('swiss medical',), 'health'),
    ProviderRecord('galeno', 'Galeno', ('galeno',), 'health'),
)


def providers_from_config(entries: Optional[Iterable[Dict[str, Any]]]) -> Tuple[ProviderRecord, ...]:
    """
    Build an immutable provider table from configuration entries.

    Falls back to DEFAULT_PROVIDERS when no entries are configured.
    """
    if not entries:
        return DEFAULT_PROVIDERS
    return tuple(
        ProviderRecord(
            id=str(entry['id']),
            name=str(entry.get('name', entry['id'])),
            patterns=tuple(str(p).lower() for p in entry.get('patterns', [])),
            type=str(entry.get('type', 'service')),
        )
        for entry in entries
    )


def load_providers() -> Tuple[ProviderRecord, ...]:
    """Provider table from settings.yaml, or the built-in default."""
    return providers_from_config(get_config("providers"))


@dataclass(frozen=True)
class ProviderMatch:
    """A detected provider with its confidence and the pattern that hit."""
    provider: ProviderRecord
    confidence: int
    pattern: str


_CUIT_RE = re.compile(
    r'c\.?\s*u\.?\s*i\.?\s*t\.?\s*(?:n[°º]?\s*)?[:\s]*(\d{2})[\-\s]?(\d{8})[\-\s]?(\d)\b',
    re.IGNORECASE
)


class ProviderDetector:
    """
    First-match-wins provider detector.

    Example:
        >>> detector = ProviderDetector()
        >>> match = detector.detect(TextNormalizer().normalize("EDENOR S.A."))
        >>> match.provider.name, match.confidence
        ("Edenor", 100)
    """

    def __init__(
        self,
        providers: Optional[Sequence[ProviderRecord]] = None,
        header_lines: Optional[int] = None
    ) -> None:
        self.providers = tuple(providers) if providers is not None else load_providers()
        self.header_lines = header_lines or get_config("extraction.provider.header_lines", 5)

    def detect(self, normalized: NormalizedText) -> Optional[ProviderMatch]:
        """
        Detect the issuing provider.

        Pass 1 scans the normalized text for each pattern in table order
        (confidence 100). Pass 2 looks for a provider id in the first
        header lines (confidence 80).

        Returns:
            ProviderMatch, or None when unidentified.
        """
        for provider in self.providers:
            for pattern in provider.patterns:
                if pattern in normalized.text:
                    return ProviderMatch(provider, 100, pattern)

        for line in normalized.lines[:self.header_lines]:
            lowered = line.lower()
            for provider in self.providers:
                if provider.id in lowered:
                    return ProviderMatch(provider, 80, provider.id)

        return None

    def find_by_name(self, name: str) -> Optional[ProviderRecord]:
        """Map a free-form provider name (e.g. from the oracle) onto the table."""
        lowered = name.lower().strip()
        if not lowered:
            return None
        for provider in self.providers:
            if lowered in (provider.id, provider.name.lower()):
                return provider
            if any(pattern in lowered for pattern in provider.patterns):
                return provider
        return None

    @staticmethod
    def find_issuer_cuit(original: str) -> Optional[str]:
        """Return the first labeled CUIT as 11 digits, if any."""
        match = _CUIT_RE.search(original)
        if not match:
            return None
        return ''.join(match.groups())
