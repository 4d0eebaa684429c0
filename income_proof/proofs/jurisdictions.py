"""Static jurisdiction policy table consulted before issuance."""

import logging
from collections.abc import Iterable

from income_proof.models import Jurisdiction, JurisdictionStatus

logger = logging.getLogger(__name__)

PERMITTED_JURISDICTIONS = [
    Jurisdiction("US", "United States", JurisdictionStatus.PERMITTED),
    Jurisdiction("UK", "United Kingdom", JurisdictionStatus.PERMITTED),
    Jurisdiction("EU", "European Union", JurisdictionStatus.PERMITTED),
    Jurisdiction("CA", "Canada", JurisdictionStatus.PERMITTED),
    Jurisdiction("AU", "Australia", JurisdictionStatus.PERMITTED),
    Jurisdiction("SG", "Singapore", JurisdictionStatus.PERMITTED),
    Jurisdiction("JP", "Japan", JurisdictionStatus.PERMITTED),
]

BLOCKED_JURISDICTIONS = [
    Jurisdiction("KP", "North Korea", JurisdictionStatus.BLOCKED),
    Jurisdiction("IR", "Iran", JurisdictionStatus.BLOCKED),
    Jurisdiction("CU", "Cuba", JurisdictionStatus.BLOCKED),
]


class JurisdictionTable:
    """Read-only code -> jurisdiction lookup.

    Codes are matched case-insensitively. Codes missing from the table are
    not blocked.
    """

    def __init__(self, entries: Iterable[Jurisdiction]) -> None:
        self._entries = {entry.code.upper(): entry for entry in entries}

    @classmethod
    def default(cls, extra_blocked: Iterable[str] = ()) -> "JurisdictionTable":
        """Build the standard table, optionally blocking more codes."""
        entries = {j.code: j for j in PERMITTED_JURISDICTIONS + BLOCKED_JURISDICTIONS}
        for code in extra_blocked:
            code = code.upper()
            name = entries[code].name if code in entries else code
            entries[code] = Jurisdiction(code, name, JurisdictionStatus.BLOCKED)
        return cls(entries.values())

    def get(self, code: str) -> Jurisdiction | None:
        return self._entries.get(code.strip().upper())

    def is_blocked(self, code: str) -> bool:
        entry = self.get(code)
        if entry is None:
            logger.warning("Jurisdiction %s not in policy table; treating as permitted", code)
            return False
        return entry.is_blocked

    def permitted(self) -> list[Jurisdiction]:
        return [j for j in self._entries.values() if not j.is_blocked]

    def blocked(self) -> list[Jurisdiction]:
        return [j for j in self._entries.values() if j.is_blocked]

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and code.strip().upper() in self._entries

    def __len__(self) -> int:
        return len(self._entries)
