"""
YAML order file loader for the Diplomacy adjudicator.
Reads a board position and its orders, with validation and auto-correction.
"""

import logging
from typing import Dict, List, Optional

import yaml

from diplomacy_adjudicator.core.map import Map
from diplomacy_adjudicator.core.orders import (
    Order, HoldOrder, MoveOrder, SupportOrder, ConvoyOrder
)
from diplomacy_adjudicator.core.units import Power, Unit, UnitType

logger = logging.getLogger(__name__)


class OrderValidationError(Exception):
    """Raised when an order cannot be validated or corrected."""
    pass


class YAMLOrderLoader:
    """Loads and validates units and orders from YAML files."""

    def __init__(self, game_map: Map):
        self.game_map = game_map
        self.units: List[Unit] = []
        self.warnings = []
        self.corrections = []

    def load_from_file(self, filepath: str) -> Dict:
        """Load YAML order file."""
        with open(filepath, 'r') as f:
            data = yaml.safe_load(f)
        return data or {}

    def load_orders(self, filepath: str) -> List[Order]:
        """Load units and orders from a file; every unit gets exactly one order."""
        data = self.load_from_file(filepath)
        self.parse_units(data)
        return self.parse_orders(data)

    def parse_units(self, yaml_data: Dict) -> List[Unit]:
        """Parse the `units` section into Unit objects."""
        self.units = []

        for unit_data in yaml_data.get('units') or []:
            try:
                power = Power.from_name(str(unit_data.get('power', '')))
                unit_type, location = self._parse_unit_spec(unit_data.get('unit', ''))
                self.units.append(Unit(power, unit_type, location))
            except (OrderValidationError, ValueError, AttributeError) as e:
                self.warnings.append(f"Failed to parse unit {unit_data}: {e}")

        return self.units

    def parse_orders(self, yaml_data: Dict) -> List[Order]:
        """
        Parse orders from YAML data into Order objects.
        Units with no order hold. Returns orders in unit order.
        """
        ordered: Dict[Unit, Order] = {}

        for order_data in yaml_data.get('orders') or []:
            try:
                order = self._parse_single_order(order_data)
            except (OrderValidationError, AttributeError) as e:
                self.warnings.append(f"Failed to parse order {order_data}: {e}")
                continue
            if order is None:
                continue
            if order.unit in ordered:
                self.warnings.append(f"Duplicate order for {order.unit}; keeping the last one")
            ordered[order.unit] = order

        orders = []
        for unit in self.units:
            orders.append(ordered.get(unit) or HoldOrder(unit))

        for warning in self.warnings:
            logger.warning(warning)
        return orders

    def _parse_single_order(self, order_data: Dict) -> Optional[Order]:
        """Parse a single order from YAML data."""
        unit_spec = str(order_data.get('unit', '')).strip()
        if not unit_spec:
            raise OrderValidationError("Missing unit specification")

        unit = self._find_unit(unit_spec)
        if not unit:
            self.warnings.append(f"Unit not found: {unit_spec}")
            return None

        action = self._normalize_action(str(order_data.get('action', 'hold')))

        if action == 'hold':
            return HoldOrder(unit)

        elif action == 'move':
            dest = self._normalize_province(order_data.get('destination', ''))
            if not dest:
                raise OrderValidationError("Missing destination for move order")
            return MoveOrder(unit, dest)

        elif action == 'support':
            # Accept both 'supports' and 'supporting' field names
            supported_spec = order_data.get('supports', '') or order_data.get('supporting', '')
            supported_unit = self._find_unit(supported_spec)
            if not supported_unit:
                self.warnings.append(f"Supported unit not found: {supported_spec}")
                return None

            destination = order_data.get('destination')
            if destination:
                dest = self._normalize_province(destination)
                if not dest:
                    raise OrderValidationError(f"Unknown destination '{destination}' for support order")
                return SupportOrder(unit, supported_unit, dest)
            return SupportOrder(unit, supported_unit)

        elif action == 'convoy':
            convoyed_spec = (order_data.get('convoys', '') or order_data.get('convoying', '')
                             or order_data.get('convoy', ''))
            convoyed_unit = self._find_unit(convoyed_spec)
            if not convoyed_unit:
                self.warnings.append(f"Convoyed unit not found: {convoyed_spec}")
                return None

            dest = self._normalize_province(order_data.get('destination', ''))
            if not dest:
                raise OrderValidationError("Missing destination for convoy order")
            return ConvoyOrder(unit, convoyed_unit, dest)

        self.warnings.append(f"Unknown action: {action}")
        return None

    def _parse_unit_spec(self, unit_spec: str):
        """Split "F Lon" or "A Par" into a unit type and province code."""
        parts = str(unit_spec).strip().split()
        if len(parts) < 2:
            raise OrderValidationError(f"Malformed unit '{unit_spec}'")

        unit_type_str = parts[0].upper()
        if unit_type_str in ('A', 'ARMY'):
            unit_type = UnitType.ARMY
        elif unit_type_str in ('F', 'FLEET'):
            unit_type = UnitType.FLEET
        else:
            raise OrderValidationError(f"Unknown unit type '{parts[0]}'")

        location = self._normalize_province(' '.join(parts[1:]))
        if not location:
            raise OrderValidationError(f"Unknown province in unit '{unit_spec}'")
        return unit_type, location

    def _find_unit(self, unit_spec: str) -> Optional[Unit]:
        """Find a declared unit from a specification like "F Lon" or "A Par"."""
        try:
            unit_type, location = self._parse_unit_spec(unit_spec)
        except OrderValidationError:
            return None

        for unit in self.units:
            if unit.province == location and unit.unit_type == unit_type:
                return unit
        return None

    def _normalize_province(self, province: str) -> Optional[str]:
        """
        Normalize a province name to its code.
        Auto-corrects case and expands full names.
        """
        if not province:
            return None

        province = str(province).strip()
        code = province.lower()
        if self.game_map.has_province(code):
            if province != code and province != code.capitalize() and province != code.upper():
                self.corrections.append(f"Corrected '{province}' to '{code}'")
            return code

        province_lower = province.lower()
        for prov in self.game_map.get_all_provinces():
            if prov.full_name.lower() == province_lower:
                self.corrections.append(f"Expanded '{province}' to '{prov.code}'")
                return prov.code

        return None

    def _normalize_action(self, action: str) -> str:
        """Normalize action name with aliases."""
        action = action.lower().strip()

        aliases = {
            'm': 'move',
            'h': 'hold',
            's': 'support',
            'c': 'convoy'
        }

        if action in aliases:
            normalized = aliases[action]
            self.corrections.append(f"Expanded action '{action}' to '{normalized}'")
            return normalized

        return action

    def get_warnings(self) -> List[str]:
        """Get all warnings from parsing."""
        return self.warnings

    def get_corrections(self) -> List[str]:
        """Get all auto-corrections made."""
        return self.corrections
