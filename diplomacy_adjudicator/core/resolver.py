"""
Resolution engine for the Diplomacy adjudicator.
Handles movement-phase adjudication and conflict resolution.

Orders are resolved in a fixed sequence of passes: unmatched elimination,
support cutting, support application, convoy checks, head-to-head battles,
priority resolution of convoying and supporting provinces, and finally a
worklist over every contested destination. Dislodging a unit that gave
support withdraws that support and reopens the moves it backed.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from diplomacy_adjudicator.core.convoy import search_reachable_coasts
from diplomacy_adjudicator.core.map import Map, create_standard_map
from diplomacy_adjudicator.core.orders import Order, OrderStatus

logger = logging.getLogger(__name__)


class InvalidOrderError(ValueError):
    """Raised when an order batch can't be adjudicated at all."""
    pass


@dataclass
class AdjudicationResult:
    """Result of resolving a movement phase."""
    orders: List[Order]
    standoffs: List[str]  # Provinces where movers bounced, in discovery order
    dislodged: List[Order] = field(default_factory=list)
    cut_supports: List[Order] = field(default_factory=list)
    move_results: Dict[str, str] = field(default_factory=dict)  # order key -> result description


class Adjudicator:
    """Resolves one movement phase for a batch of orders."""

    def __init__(self, orders: List[Order], game_map: Optional[Map] = None):
        self.orders = list(orders)
        self.game_map = game_map or create_standard_map()
        self.standoffs: List[str] = []

        self._validate()

        # Arena indices
        self._by_key: Dict[str, int] = {}
        self._by_province: Dict[str, int] = {}
        self._moves_into: Dict[str, List[int]] = {}
        self._supports_of: Dict[int, List[int]] = {}
        self._convoys_of: Dict[int, List[int]] = {}
        self._index()

        self._queue = deque()
        self._queued = set()

    def _validate(self) -> None:
        seen = set()
        for order in self.orders:
            if not isinstance(order, Order):
                raise InvalidOrderError(f"Not an order: {order!r}")
            province = order.province
            if not self.game_map.has_province(province):
                raise InvalidOrderError(f"Unknown province '{province}' in order {order}")
            if order.is_move() and not self.game_map.has_province(order.destination):
                raise InvalidOrderError(f"Unknown destination '{order.destination}' in order {order}")
            if province in seen:
                raise InvalidOrderError(f"More than one unit ordered in '{province}'")
            seen.add(province)

    def _index(self) -> None:
        for i, order in enumerate(self.orders):
            self._by_key[order.key()] = i
            self._by_province[order.province] = i
            if order.is_move():
                self._moves_into.setdefault(order.destination, []).append(i)

    def resolve(self) -> AdjudicationResult:
        """Run every resolution pass and collect the outcome."""
        logger.debug(f"Adjudicating {len(self.orders)} orders")

        self._initialize()
        self._eliminate_unmatched()
        self._detect_cuts()
        self._apply_supports()
        self._check_convoys()
        self._resolve_head_to_head()
        self._resolve_convoy_provinces()
        self._resolve_support_provinces()
        self._resolve_remaining()
        self._finalize()

        return self._build_result()

    # Passes

    def _initialize(self) -> None:
        self.standoffs = []
        self._queue.clear()
        self._queued.clear()
        self._supports_of = {}
        self._convoys_of = {}
        for order in self.orders:
            order.reset()

    def _eliminate_unmatched(self) -> None:
        """Supports and convoys naming no existing order can never take effect."""
        for i, order in enumerate(self.orders):
            if not (order.is_support() or order.is_convoy()):
                continue
            target = self._by_key.get(order.target)
            if target is None or (order.is_convoy() and not self.orders[target].is_move()):
                order.mark_unmatched()
                logger.debug(f"{order}: no matching order for {order.target}")
                continue
            if order.is_support():
                self._supports_of.setdefault(target, []).append(i)
            else:
                self._convoys_of.setdefault(target, []).append(i)

    def _detect_cuts(self) -> None:
        for order in self.orders:
            if not order.is_support() or order.is_resolved():
                continue
            enemies = [
                m for m in self._moves_into.get(order.province, [])
                if not self.orders[m].is_resolved() and self.orders[m].power != order.power
            ]
            if not enemies:
                continue
            if len(enemies) > 1 or self._attack_cuts(order, enemies[0]):
                order.cut()
                logger.debug(f"{order}: support cut")

    def _attack_cuts(self, support: Order, enemy: int) -> bool:
        """Whether a single enemy move into the supporter's province cuts the support."""
        attacker = self.orders[enemy]
        target = self.orders[self._by_key[support.target]]

        if not self.game_map.is_adjacent(attacker.province, support.province):
            # A convoyed attack only cuts if its fleets can actually land it here
            excluded = None
            if target.is_move():
                excluded = self._by_province.get(target.destination)
            fleets = [
                self.orders[c].unit for c in self._convoys_of.get(enemy, [])
                if c != excluded and not self.orders[c].is_resolved()
            ]
            reach = search_reachable_coasts(self.game_map, attacker.unit, fleets)
            if support.province not in reach:
                return False

        if target.is_move() and target.destination == attacker.province:
            return False
        return True

    def _apply_supports(self) -> None:
        for order in self.orders:
            if not order.is_support() or order.is_resolved():
                continue
            target = self._by_key.get(order.target)
            if target is None:
                order.reject()
                continue
            self.orders[target].support_count += 1
            order.apply()

    def _check_convoys(self) -> None:
        for i, order in enumerate(self.orders):
            if not order.is_move() or order.is_resolved():
                continue
            convoys = [c for c in self._convoys_of.get(i, []) if not self.orders[c].is_resolved()]
            if not convoys:
                continue
            fleets = [self.orders[c].unit for c in convoys]
            reach = search_reachable_coasts(self.game_map, order.unit, fleets)
            viable = order.destination in reach
            for c in convoys:
                if viable:
                    self.orders[c].apply()
                else:
                    self.orders[c].reject()
            logger.debug(f"{order}: convoy {'viable' if viable else 'broken'}")

        for i, order in enumerate(self.orders):
            if not order.is_move() or order.is_resolved():
                continue
            if not self._has_direct_route(i) and not self._has_sea_route(i):
                order.reject()
                logger.debug(f"{order}: no route to {order.destination}")

    def _resolve_head_to_head(self) -> None:
        for i, order in enumerate(self.orders):
            if not order.is_move() or order.is_resolved():
                continue
            j = self._by_province.get(order.destination)
            if j is None or j <= i:
                continue
            other = self.orders[j]
            if not other.is_move() or other.is_resolved() or other.destination != order.province:
                continue
            if self._has_sea_route(i) or self._has_sea_route(j):
                continue
            self._battle(i, j)

    def _battle(self, a: int, b: int) -> None:
        """Two units trying to swap places without a convoy."""
        first, second = self.orders[a], self.orders[b]

        if first.power == second.power:
            self._fail_move(a)
            self._fail_move(b)
            return

        strength_a = self._support_excluding(a, second.power)
        strength_b = self._support_excluding(b, first.power)
        if strength_a == strength_b:
            self._fail_move(a)
            self._fail_move(b)
            logger.debug(f"Head-to-head {first} / {second}: equal strength")
            return

        winner, loser = (a, b) if strength_a > strength_b else (b, a)
        winning = self.orders[winner]
        contested = any(
            m != winner and not self.orders[m].is_resolved()
            for m in self._moves_into.get(winning.destination, [])
        )
        if contested:
            # The loser stays put as a beaten holder; the winner still has to
            # beat the other movers into its destination.
            self.orders[loser].fail()
            return

        winning.succeed()
        self._dislodge(loser, winner)
        logger.debug(f"Head-to-head: {winning} beats {self.orders[loser]}")

    def _resolve_convoy_provinces(self) -> None:
        for province in self._unique_provinces(lambda o: o.is_convoy()):
            self._resolve_destination(province)

        for i, order in enumerate(self.orders):
            if order.is_move() and not order.is_resolved():
                if not self._has_direct_route(i) and not self._has_sea_route(i):
                    logger.debug(f"{order}: convoy disrupted")
                    self._fail_move(i)

    def _resolve_support_provinces(self) -> None:
        for province in self._unique_provinces(lambda o: o.is_support()):
            self._resolve_destination(province)

    def _resolve_remaining(self) -> None:
        for order in self.orders:
            if order.is_move() and not order.is_resolved():
                self._enqueue(order.destination)

        while self._queue:
            destination = self._queue.popleft()
            self._queued.discard(destination)
            self._resolve_destination(destination)

    def _finalize(self) -> None:
        for order in self.orders:
            if not order.is_resolved():
                order.succeed()

    # Destination resolution

    def _resolve_destination(self, destination: str) -> None:
        """Settle every unresolved move into one province."""
        for m in self._pending_moves(destination):
            if not self._has_direct_route(m) and not self._has_sea_route(m):
                logger.debug(f"{self.orders[m]}: convoy route lost")
                self._fail_move(m)

        movers = self._pending_moves(destination)
        if not movers:
            return
        holder = self._holder(destination)

        if len(movers) == 1:
            self._attack(movers[0], holder)
            return

        top = max(self.orders[m].support_count for m in movers)
        leaders = [m for m in movers if self.orders[m].support_count == top]
        if len(leaders) > 1:
            for m in movers:
                self._fail_move(m)
            self._add_standoff(destination)
            return

        winner = leaders[0]
        self._attack(winner, holder)
        for m in movers:
            if m != winner:
                self._fail_move(m)

    def _attack(self, mover: int, holder: Optional[int]) -> bool:
        """A single move against whatever stays in its destination."""
        move = self.orders[mover]
        if holder is None:
            move.succeed()
            return True

        defender = self.orders[holder]
        if defender.status == OrderStatus.DISLODGED:
            # Someone else already took the province
            logger.debug(f"{move}: {defender} already dislodged")
            self._fail_move(mover)
            return False

        if defender.power == move.power:
            for s in self._applied_supports(mover):
                self.orders[s].reject()
            move.support_count = 0
            logger.debug(f"{move}: fails against own unit {defender}")
            self._fail_move(mover)
            return False

        # A power never helps dislodge its own unit
        for s in self._applied_supports(mover):
            if self.orders[s].power == defender.power:
                self.orders[s].reject()
                move.support_count -= 1

        hold_strength = 0 if defender.is_move() else defender.support_count
        if hold_strength >= move.support_count:
            self._fail_move(mover)
            return False

        move.succeed()
        self._dislodge(holder, mover)
        return True

    def _fail_move(self, i: int) -> None:
        self.orders[i].fail()
        self._rewind(i)

    def _rewind(self, failed: int) -> None:
        """
        A move that failed leaves its unit at home. Any move that already
        succeeded into that province must now beat it or fail too.
        """
        stuck = self.orders[failed]
        entered = None
        for m in self._moves_into.get(stuck.province, []):
            if self.orders[m].status == OrderStatus.SUCCEEDED:
                entered = m
                break
        if entered is None:
            return

        attacker = self.orders[entered]
        if attacker.power != stuck.power and self._support_excluding(entered, stuck.power) > 0:
            self._dislodge(failed, entered)
            return

        logger.debug(f"{attacker}: blocked by {stuck} staying put")
        attacker.fail()
        self._rewind(entered)

    def _dislodge(self, victim: int, attacker: int) -> None:
        order = self.orders[victim]
        prior = order.status
        order.dislodge(self.orders[attacker].province)
        logger.debug(f"{order} dislodged by {self.orders[attacker]}")

        if order.is_support() and prior == OrderStatus.APPLIED:
            self._withdraw_support(victim)

    def _withdraw_support(self, support: int) -> None:
        """A dislodged supporter no longer backs its target."""
        order = self.orders[support]
        target_index = self._by_key[order.target]
        target = self.orders[target_index]
        target.support_count -= 1
        logger.debug(f"{order}: support withdrawn from {target}")

        if target.is_move():
            for m in self._moves_into.get(target.destination, []):
                self._reopen(m)

    def _reopen(self, i: int) -> None:
        """
        Give a failed move another try. Unresolved moves are picked up anyway.
        A move never succeeds ahead of its supporters' provinces, so an
        uncut supporter can't be dislodged after its move has already gone in.
        """
        order = self.orders[i]
        if order.status != OrderStatus.FAILED:
            return
        if not order.reopen():
            return

        # The bounce gets decided again
        if order.destination in self.standoffs:
            self.standoffs.remove(order.destination)
        logger.debug(f"{order}: reopened")
        self._enqueue(order.destination)

    # Helpers

    def _pending_moves(self, destination: str) -> List[int]:
        return [m for m in self._moves_into.get(destination, []) if not self.orders[m].is_resolved()]

    def _holder(self, province: str) -> Optional[int]:
        """The unit that stays in a province, if any."""
        i = self._by_province.get(province)
        if i is None:
            return None
        order = self.orders[i]
        if not order.is_move():
            return i
        if order.status in (OrderStatus.FAILED, OrderStatus.DISLODGED, OrderStatus.REJECTED):
            return i
        return None

    def _applied_supports(self, i: int) -> List[int]:
        return [s for s in self._supports_of.get(i, []) if self.orders[s].status == OrderStatus.APPLIED]

    def _support_excluding(self, i: int, power) -> int:
        return sum(1 for s in self._applied_supports(i) if self.orders[s].power != power)

    def _has_direct_route(self, i: int) -> bool:
        order = self.orders[i]
        return self.game_map.is_adjacent(order.province, order.destination, order.unit.unit_type)

    def _has_sea_route(self, i: int) -> bool:
        """Whether the applied convoys of a move still carry it to its destination."""
        fleets = [
            self.orders[c].unit for c in self._convoys_of.get(i, [])
            if self.orders[c].status == OrderStatus.APPLIED
        ]
        if not fleets:
            return False
        order = self.orders[i]
        return order.destination in search_reachable_coasts(self.game_map, order.unit, fleets)

    def _unique_provinces(self, predicate) -> List[str]:
        provinces = []
        for order in self.orders:
            if predicate(order) and order.province not in provinces:
                provinces.append(order.province)
        return provinces

    def _enqueue(self, destination: str) -> None:
        if destination not in self._queued:
            self._queued.add(destination)
            self._queue.append(destination)

    def _add_standoff(self, province: str) -> None:
        if province not in self.standoffs:
            self.standoffs.append(province)
        logger.debug(f"Standoff in {province}")

    def _build_result(self) -> AdjudicationResult:
        move_results = {}
        for order in self.orders:
            move_results[order.key()] = self._describe(order)

        dislodged = [o for o in self.orders if o.status == OrderStatus.DISLODGED]
        cut = [o for o in self.orders if o.status == OrderStatus.CUT]

        logger.info(
            f"Adjudicated {len(self.orders)} orders: {len(dislodged)} dislodged, "
            f"{len(cut)} supports cut, {len(self.standoffs)} standoffs"
        )
        return AdjudicationResult(
            orders=self.orders,
            standoffs=list(self.standoffs),
            dislodged=dislodged,
            cut_supports=cut,
            move_results=move_results
        )

    @staticmethod
    def _describe(order: Order) -> str:
        status = order.status
        if status == OrderStatus.DISLODGED:
            return f"Dislodged (may not retreat to {order.retreat_prohibition})"
        if order.is_move():
            if status == OrderStatus.SUCCEEDED:
                return f"Moved to {order.destination}"
            if status == OrderStatus.REJECTED:
                return f"No route to {order.destination}"
            return f"Bounced from {order.destination}"
        if order.is_support() or order.is_convoy():
            return status.value.capitalize()
        return "Held position"


def adjudicate(orders: List[Order], game_map: Optional[Map] = None) -> Tuple[List[Order], List[str]]:
    """Resolve a batch of orders and return them with the standoff provinces."""
    result = Adjudicator(orders, game_map).resolve()
    return result.orders, result.standoffs


def resolve_movement_phase(orders: List[Order], game_map: Optional[Map] = None) -> AdjudicationResult:
    """Convenience function to resolve a movement phase."""
    resolver = Adjudicator(orders, game_map)
    return resolver.resolve()
