"""
Convoy route search.
Finds the coastal provinces an army can be carried to by a chain of fleets.
"""

from collections import deque
from typing import Iterable, Set

from diplomacy_adjudicator.core.map import Map, ProvinceType
from diplomacy_adjudicator.core.units import Unit, UnitType


def search_reachable_coasts(game_map: Map, unit: Unit, fleets: Iterable[Unit]) -> Set[str]:
    """
    Collect every coastal province reachable from the unit's province through
    sea provinces occupied by the given fleets.

    Fleets standing on coastal provinces never take part in a chain. The
    unit's own province is never part of the result.
    """
    fleet_zones = {
        fleet.province for fleet in fleets
        if game_map.has_province(fleet.province)
        and game_map.province_kind(fleet.province) == ProvinceType.SEA
    }
    if not fleet_zones:
        return set()

    origin = unit.province
    queue = deque()
    visited = set()

    # Step from the shore onto the first fleets
    for adj in game_map.adjacents(origin):
        if adj in fleet_zones and adj not in visited:
            visited.add(adj)
            queue.append(adj)

    coasts: Set[str] = set()
    while queue:
        current = queue.popleft()

        for adj, allowed in game_map.adjacents(current).items():
            if UnitType.FLEET not in allowed:
                continue
            kind = game_map.province_kind(adj)
            if kind == ProvinceType.COASTAL:
                if adj != origin:
                    coasts.add(adj)
            elif kind == ProvinceType.SEA and adj in fleet_zones and adj not in visited:
                visited.add(adj)
                queue.append(adj)

    return coasts
