"""
Units module for the Diplomacy adjudicator.
Defines the great powers, unit types and the units standing on the board.
"""

from enum import Enum
from dataclasses import dataclass


class Power(Enum):
    """The seven great powers."""
    ENGLAND = "England"
    FRANCE = "France"
    GERMANY = "Germany"
    ITALY = "Italy"
    AUSTRIA = "Austria-Hungary"
    RUSSIA = "Russia"
    TURKEY = "Turkey"

    @property
    def symbol(self) -> str:
        """One-letter code used in order keys (e.g. 'g' for Germany)."""
        return self.value[0].lower()

    @staticmethod
    def from_name(name: str) -> 'Power':
        """Look up a power by full name, enum name or one-letter symbol."""
        text = name.strip().lower()
        for power in Power:
            if text in (power.value.lower(), power.name.lower(), power.symbol):
                return power
        if text == "austria":
            return Power.AUSTRIA
        raise ValueError(f"Unknown power: {name}")


class UnitType(Enum):
    """Type of military unit."""
    ARMY = "Army"
    FLEET = "Fleet"

    @property
    def symbol(self) -> str:
        return self.value[0].lower()


@dataclass(frozen=True)
class Unit:
    """A unit on the board. Immutable for the duration of an adjudication."""
    power: Power
    unit_type: UnitType
    province: str  # Province code, lower case

    def is_army(self) -> bool:
        return self.unit_type == UnitType.ARMY

    def is_fleet(self) -> bool:
        return self.unit_type == UnitType.FLEET

    def key(self) -> str:
        """Stable key for this unit, e.g. 'f-a-mar'."""
        return unit_key(self.power, self.unit_type, self.province)

    def __repr__(self) -> str:
        return f"{self.unit_type.value[0]} {self.province.capitalize()}"


def unit_key(power: Power, unit_type: UnitType, province: str) -> str:
    """Build the key a unit is addressed by in support and convoy targets."""
    return f"{power.symbol}-{unit_type.symbol}-{province}"
