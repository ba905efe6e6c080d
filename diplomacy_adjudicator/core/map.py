"""
Map module for the Diplomacy adjudicator.
Defines provinces, unit-typed adjacencies, and loads the standard map.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Dict, List, Set, Optional, Iterable

import yaml

from diplomacy_adjudicator.core.units import UnitType

logger = logging.getLogger(__name__)

STANDARD_MAP_PATH = Path(__file__).resolve().parent.parent / "data" / "standard_map.yaml"


class MapDataError(Exception):
    """Raised when map data cannot be parsed or is inconsistent."""
    pass


class ProvinceType(Enum):
    """Type of province."""
    INLAND = "inland"
    COASTAL = "coastal"
    SEA = "sea"


class Province:
    """Represents a single province on the map."""

    def __init__(
        self,
        code: str,
        full_name: str = None,
        province_type: ProvinceType = ProvinceType.INLAND,
        is_supply_center: bool = False
    ):
        self.code = code
        self.full_name = full_name or code
        self.province_type = province_type
        self.is_supply_center = is_supply_center

    def is_inland(self) -> bool:
        return self.province_type == ProvinceType.INLAND

    def is_sea(self) -> bool:
        return self.province_type == ProvinceType.SEA

    def is_coastal(self) -> bool:
        return self.province_type == ProvinceType.COASTAL

    def __repr__(self) -> str:
        return f"Province({self.code}, {self.full_name})"


class Map:
    """The Diplomacy game board with provinces and adjacencies."""

    def __init__(self):
        self.provinces: Dict[str, Province] = {}
        self.adjacencies: Dict[str, Dict[str, Set[UnitType]]] = {}

    def add_province(self, province: Province) -> None:
        """Add a province to the map."""
        self.provinces[province.code] = province
        self.adjacencies.setdefault(province.code, {})

    def add_adjacency(self, from_code: str, to_code: str, unit_types: Iterable[UnitType]) -> None:
        """
        Add a two-way adjacency between two provinces for the given unit types.
        Calling it again for the same pair widens the set of allowed unit types.
        """
        for code in (from_code, to_code):
            if code not in self.provinces:
                raise MapDataError(f"Adjacency references unknown province '{code}'")

        types = set(unit_types)
        self.adjacencies[from_code].setdefault(to_code, set()).update(types)
        self.adjacencies[to_code].setdefault(from_code, set()).update(types)

    def adjacents(self, code: str) -> Dict[str, Set[UnitType]]:
        """Neighbors of a province mapped to the unit types that may cross the border."""
        return self.adjacencies.get(code, {})

    def province_kind(self, code: str) -> ProvinceType:
        """Classification of a province as inland, coastal or sea."""
        province = self.provinces.get(code)
        if province is None:
            raise KeyError(f"Unknown province: {code}")
        return province.province_type

    def is_adjacent(self, from_code: str, to_code: str, unit_type: Optional[UnitType] = None) -> bool:
        """Check if two provinces are adjacent, optionally for a specific unit type."""
        allowed = self.adjacents(from_code).get(to_code)
        if not allowed:
            return False
        if unit_type is None:
            return True
        return unit_type in allowed

    def get_adjacent_provinces(self, code: str, unit_type: Optional[UnitType] = None) -> List[str]:
        """Get all provinces adjacent to the given province."""
        return [
            adj for adj, allowed in self.adjacents(code).items()
            if unit_type is None or unit_type in allowed
        ]

    def has_province(self, code: str) -> bool:
        return code in self.provinces

    def get_province(self, code: str) -> Optional[Province]:
        """Get a province by its code."""
        return self.provinces.get(code)

    def get_all_provinces(self) -> List[Province]:
        """Get all provinces in the map."""
        return list(self.provinces.values())

    def get_supply_centers(self) -> List[Province]:
        """Get all supply center provinces."""
        return [p for p in self.provinces.values() if p.is_supply_center]


def _parse_edge(entry) -> List[str]:
    if isinstance(entry, str):
        parts = entry.replace("-", " ").split()
    else:
        parts = list(entry)
    if len(parts) != 2:
        raise MapDataError(f"Malformed adjacency entry: {entry!r}")
    return [str(p).strip().lower() for p in parts]


def build_map(data: Dict) -> Map:
    """Build a Map from already-parsed map data (see data/standard_map.yaml)."""
    if not isinstance(data, dict) or 'provinces' not in data:
        raise MapDataError("Map data must contain a 'provinces' section")

    game_map = Map()

    for code, info in data['provinces'].items():
        info = info or {}
        try:
            province_type = ProvinceType(info.get('kind', 'inland'))
        except ValueError:
            raise MapDataError(f"Province '{code}' has unknown kind {info.get('kind')!r}")
        game_map.add_province(Province(
            str(code).lower(),
            info.get('name'),
            province_type,
            bool(info.get('supply_center', False))
        ))

    for unit_type in UnitType:
        for entry in data.get(unit_type.value.lower(), None) or []:
            from_code, to_code = _parse_edge(entry)
            game_map.add_adjacency(from_code, to_code, [unit_type])

    logger.debug(f"Built map with {len(game_map.provinces)} provinces")
    return game_map


def load_map(path) -> Map:
    """Load a map from a YAML file."""
    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise MapDataError(f"Could not parse map file {path}: {e}") from e
    return build_map(data)


def create_standard_map() -> Map:
    """Create the standard 1901 Diplomacy map."""
    return load_map(STANDARD_MAP_PATH)
