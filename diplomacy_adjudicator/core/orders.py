"""
Order system for the Diplomacy adjudicator.
Defines the four movement-phase order types, their keys and resolution state,
and parsing of text orders.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Iterable, Optional, Union

from diplomacy_adjudicator.core.units import Unit, UnitType


class OrderStatus(Enum):
    """Resolution status of an order."""
    UNRESOLVED = "unresolved"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    DISLODGED = "dislodged"
    APPLIED = "applied"
    REJECTED = "rejected"
    CUT = "cut"
    UNMATCHED = "unmatched"


def _describe_key(key: str) -> str:
    """Render an order key such as 'f-a-mar-bur' as 'A Mar-Bur'."""
    parts = key.split("-")
    if len(parts) < 3:
        return key
    text = f"{parts[1].upper()} {parts[2].capitalize()}"
    if len(parts) > 3:
        text += f"-{parts[3].capitalize()}"
    return text


class Order(ABC):
    """Base class for all order types."""

    def __init__(self, unit: Unit):
        self.unit = unit
        self.reset()

    def reset(self) -> None:
        """Clear all resolution state."""
        self.status = OrderStatus.UNRESOLVED
        self.support_count = 0
        self.retreat_prohibition: Optional[str] = None
        self.reopened = False

    @property
    def power(self):
        return self.unit.power

    @property
    def province(self) -> str:
        return self.unit.province

    def key(self) -> str:
        return self.unit.key()

    def is_move(self) -> bool:
        return False

    def is_support(self) -> bool:
        return False

    def is_convoy(self) -> bool:
        return False

    def is_resolved(self) -> bool:
        return self.status != OrderStatus.UNRESOLVED

    # Status transitions

    def succeed(self) -> None:
        self.status = OrderStatus.SUCCEEDED

    def fail(self) -> None:
        self.status = OrderStatus.FAILED

    def apply(self) -> None:
        self.status = OrderStatus.APPLIED

    def reject(self) -> None:
        self.status = OrderStatus.REJECTED

    def cut(self) -> None:
        self.status = OrderStatus.CUT

    def mark_unmatched(self) -> None:
        self.status = OrderStatus.UNMATCHED

    def dislodge(self, attacker_origin: str) -> None:
        """Dislodge this order's unit; it may not retreat to the attacker's origin."""
        self.status = OrderStatus.DISLODGED
        self.retreat_prohibition = attacker_origin

    def reopen(self) -> bool:
        """
        Put the order back to UNRESOLVED. An order may be reopened only once
        per adjudication; returns False when that allowance is used up.
        """
        if self.reopened:
            return False
        self.reopened = True
        self.status = OrderStatus.UNRESOLVED
        return True

    @abstractmethod
    def to_string(self) -> str:
        """Convert order to string representation."""
        pass

    def __repr__(self) -> str:
        return self.to_string()


class HoldOrder(Order):
    """Order for a unit to hold its current position."""

    def to_string(self) -> str:
        return f"{self.unit} H"


class MoveOrder(Order):
    """Order for a unit to move to another province, over land or by convoy."""

    def __init__(self, unit: Unit, destination: str):
        super().__init__(unit)
        self.destination = destination

    def key(self) -> str:
        return f"{self.unit.key()}-{self.destination}"

    def is_move(self) -> bool:
        return True

    def to_string(self) -> str:
        return f"{self.unit} -> {self.destination.capitalize()}"


class SupportOrder(Order):
    """
    Order for a unit to support another unit.

    The supported unit can be given as a Unit or as its key. Without a
    destination the order supports the unit in place; with one it supports
    the unit's move there.
    """

    def __init__(
        self,
        unit: Unit,
        supported_unit: Union[Unit, str],
        destination: Optional[str] = None
    ):
        super().__init__(unit)
        supported_key = supported_unit.key() if isinstance(supported_unit, Unit) else supported_unit
        self.destination = destination
        self.target = f"{supported_key}-{destination}" if destination else supported_key

    def is_support_hold(self) -> bool:
        return self.destination is None

    def is_support(self) -> bool:
        return True

    def to_string(self) -> str:
        return f"{self.unit} S {_describe_key(self.target)}"


class ConvoyOrder(Order):
    """Order for a fleet to carry an army's move across water."""

    def __init__(self, unit: Unit, convoyed_unit: Union[Unit, str], destination: str):
        super().__init__(unit)
        convoyed_key = convoyed_unit.key() if isinstance(convoyed_unit, Unit) else convoyed_unit
        self.destination = destination
        self.target = f"{convoyed_key}-{destination}"

    def is_convoy(self) -> bool:
        return True

    def to_string(self) -> str:
        return f"{self.unit} C {_describe_key(self.target)}"


class OrderParser:
    """Parse order strings into Order objects."""

    @staticmethod
    def _find_unit(type_str: str, location: str, units: Iterable[Unit]) -> Optional[Unit]:
        type_str = type_str.upper()
        location = location.strip().lower()
        for u in units:
            if u.province != location:
                continue
            if (type_str == "A" and u.unit_type == UnitType.ARMY) or \
               (type_str == "F" and u.unit_type == UnitType.FLEET):
                return u
        return None

    @staticmethod
    def _split_move(parts, start):
        """Read 'Par-Bur' or 'Par - Bur' starting at parts[start]."""
        part = parts[start]
        if "-" in part:
            origin, dest = part.split("-", 1)
            return origin, dest.strip() or None
        if len(parts) > start + 2 and parts[start + 1] == "-":
            return part, parts[start + 2]
        return part, None

    @staticmethod
    def parse_order(order_str: str, units: Iterable[Unit]) -> Optional[Order]:
        """
        Parse an order string into an Order object.

        Format examples:
        - "A Par H" - Army Paris holds
        - "A Par-Bur" - Army Paris to Burgundy
        - "A Par - Bur" - Army Paris to Burgundy (with spaces)
        - "F Bre S A Par-Pic" - Fleet Brest supports Army Paris to Picardy
        - "F Bre S A Par" - Fleet Brest supports Army Paris (hold)
        - "F NTH C A Lon-Bel" - Fleet North Sea convoys Army London to Belgium

        Returns None when the text can't be parsed or names a unit not in `units`.
        """
        units = list(units)
        parts = order_str.strip().split()
        if len(parts) < 2:
            return None

        location, destination = OrderParser._split_move(parts, 1)
        unit = OrderParser._find_unit(parts[0], location, units)
        if unit is None:
            return None

        if destination:
            return MoveOrder(unit, destination.lower())

        if len(parts) == 2:
            return HoldOrder(unit)

        order_type = parts[2].upper()
        if order_type == "H":
            return HoldOrder(unit)

        if order_type in ("S", "C"):
            if len(parts) < 5:
                return None
            target_loc, target_dest = OrderParser._split_move(parts, 4)
            target = OrderParser._find_unit(parts[3], target_loc, units)
            if target is None:
                return None
            if order_type == "S":
                return SupportOrder(unit, target, target_dest.lower() if target_dest else None)
            if not target_dest:
                return None
            return ConvoyOrder(unit, target, target_dest.lower())

        return None
