"""
FinalRow domain model.

Defines the FinalRow dataclass for one line of the signal mapping export.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class FinalRow:
    """
    Represents a single exported signal mapping.

    Attributes:
        device: Device acronym the signal belongs to.
        description: Signal description, passed through unchanged.
        identifier: Measurement point (at most 16 characters of A-Z, 0-9 and '_').
        quantity: Quantity descriptor, e.g. 'PhaseA.Voltage.Magnitude'.
    """

    device: Optional[str]
    description: Optional[str]
    identifier: str
    quantity: str

    @property
    def dedup_key(self) -> tuple[str, str]:
        return self.identifier.upper(), self.quantity.upper()
