"""
Tests for order keys, status transitions and text order parsing.
"""

from diplomacy_adjudicator.core.orders import (
    HoldOrder, MoveOrder, SupportOrder, ConvoyOrder, OrderParser, OrderStatus
)
from diplomacy_adjudicator.core.units import Power, Unit, UnitType


def test_unit_keys():
    assert Unit(Power.GERMANY, UnitType.ARMY, 'bur').key() == 'g-a-bur'
    assert Unit(Power.AUSTRIA, UnitType.FLEET, 'tri').key() == 'a-f-tri'
    assert repr(Unit(Power.FRANCE, UnitType.ARMY, 'mar')) == "A Mar"


def test_power_lookup():
    assert Power.from_name("Austria-Hungary") == Power.AUSTRIA
    assert Power.from_name("austria") == Power.AUSTRIA
    assert Power.from_name("T") == Power.TURKEY
    assert Power.from_name("england") == Power.ENGLAND


def test_order_keys():
    mar = Unit(Power.FRANCE, UnitType.ARMY, 'mar')
    gas = Unit(Power.FRANCE, UnitType.ARMY, 'gas')

    assert MoveOrder(mar, 'bur').key() == 'f-a-mar-bur'
    assert HoldOrder(mar).key() == 'f-a-mar'
    assert SupportOrder(gas, mar, 'bur').key() == 'f-a-gas'
    assert SupportOrder(gas, mar, 'bur').target == 'f-a-mar-bur'
    assert SupportOrder(gas, mar).target == 'f-a-mar'
    assert SupportOrder(gas, 'f-a-mar', 'bur').target == 'f-a-mar-bur'


def test_convoy_target_is_move_key():
    lon = Unit(Power.ENGLAND, UnitType.ARMY, 'lon')
    nth = Unit(Power.ENGLAND, UnitType.FLEET, 'nth')

    convoy = ConvoyOrder(nth, lon, 'nwy')

    assert convoy.key() == 'e-f-nth'
    assert convoy.target == 'e-a-lon-nwy'
    assert str(convoy) == "F Nth C A Lon-Nwy"


def test_new_order_is_unresolved():
    order = HoldOrder(Unit(Power.ITALY, UnitType.FLEET, 'nap'))

    assert order.status == OrderStatus.UNRESOLVED
    assert order.support_count == 0
    assert order.retreat_prohibition is None


def test_dislodge_sets_retreat_prohibition():
    order = HoldOrder(Unit(Power.ITALY, UnitType.FLEET, 'nap'))
    order.apply()

    order.dislodge('tun')
    assert order.status == OrderStatus.DISLODGED
    assert order.retreat_prohibition == 'tun'

    order.reset()
    assert order.status == OrderStatus.UNRESOLVED
    assert order.retreat_prohibition is None


def test_reopen_only_once():
    order = MoveOrder(Unit(Power.ITALY, UnitType.FLEET, 'nap'), 'tys')
    order.succeed()

    assert order.reopen()
    assert order.status == OrderStatus.UNRESOLVED
    order.fail()
    assert not order.reopen()
    assert order.status == OrderStatus.FAILED

    order.reset()
    assert order.reopen()


UNITS = [
    Unit(Power.FRANCE, UnitType.ARMY, 'par'),
    Unit(Power.FRANCE, UnitType.FLEET, 'bre'),
    Unit(Power.ENGLAND, UnitType.ARMY, 'lon'),
    Unit(Power.ENGLAND, UnitType.FLEET, 'nth'),
]


def test_parse_hold():
    order = OrderParser.parse_order("A Par H", UNITS)
    assert isinstance(order, HoldOrder)
    assert order.unit == UNITS[0]

    assert isinstance(OrderParser.parse_order("A Par", UNITS), HoldOrder)


def test_parse_move_formats():
    for text in ("A Par-Bur", "A Par - Bur", "a par-bur"):
        order = OrderParser.parse_order(text, UNITS)
        assert isinstance(order, MoveOrder)
        assert order.destination == 'bur'
        assert order.key() == 'f-a-par-bur'


def test_parse_support():
    move_support = OrderParser.parse_order("F Bre S A Par-Pic", UNITS)
    assert isinstance(move_support, SupportOrder)
    assert move_support.target == 'f-a-par-pic'

    spaced = OrderParser.parse_order("F Bre S A Par - Pic", UNITS)
    assert spaced.target == 'f-a-par-pic'

    hold_support = OrderParser.parse_order("F Bre S A Par", UNITS)
    assert hold_support.is_support_hold()
    assert hold_support.target == 'f-a-par'


def test_parse_convoy():
    order = OrderParser.parse_order("F NTH C A Lon-Bel", UNITS)

    assert isinstance(order, ConvoyOrder)
    assert order.target == 'e-a-lon-bel'


def test_parse_failures():
    assert OrderParser.parse_order("A", UNITS) is None
    assert OrderParser.parse_order("A Mun H", UNITS) is None
    assert OrderParser.parse_order("F Par H", UNITS) is None
    assert OrderParser.parse_order("F NTH C A Lon", UNITS) is None
    assert OrderParser.parse_order("F Bre S A Mun-Bur", UNITS) is None
    assert OrderParser.parse_order("A Par X", UNITS) is None
