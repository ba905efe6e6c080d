"""
Diplomacy Adjudicator
Resolves the simultaneous orders of a Diplomacy movement phase.
"""

from diplomacy_adjudicator.core.units import Power, UnitType, Unit
from diplomacy_adjudicator.core.map import Map, MapDataError, create_standard_map, load_map
from diplomacy_adjudicator.core.orders import (
    Order, OrderStatus, HoldOrder, MoveOrder, SupportOrder, ConvoyOrder, OrderParser
)
from diplomacy_adjudicator.core.resolver import (
    Adjudicator, AdjudicationResult, InvalidOrderError, adjudicate, resolve_movement_phase
)
from diplomacy_adjudicator.io.yaml_orders import YAMLOrderLoader

__version__ = "1.0.0"
__all__ = [
    'Power', 'UnitType', 'Unit',
    'Map', 'MapDataError', 'create_standard_map', 'load_map',
    'Order', 'OrderStatus', 'HoldOrder', 'MoveOrder', 'SupportOrder', 'ConvoyOrder', 'OrderParser',
    'Adjudicator', 'AdjudicationResult', 'InvalidOrderError', 'adjudicate', 'resolve_movement_phase',
    'YAMLOrderLoader'
]
