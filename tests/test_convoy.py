"""
Tests for the convoy route search.
"""

from diplomacy_adjudicator.core.convoy import search_reachable_coasts
from diplomacy_adjudicator.core.map import create_standard_map
from diplomacy_adjudicator.core.units import Power, Unit, UnitType

GAME_MAP = create_standard_map()


def army(province):
    return Unit(Power.ENGLAND, UnitType.ARMY, province)


def fleet(province, power=Power.ENGLAND):
    return Unit(power, UnitType.FLEET, province)


def test_single_fleet_reaches_its_coasts():
    coasts = search_reachable_coasts(GAME_MAP, army('lon'), [fleet('nth')])

    assert coasts == {'edi', 'yor', 'bel', 'hol', 'den', 'nwy'}


def test_origin_is_never_reachable():
    coasts = search_reachable_coasts(GAME_MAP, army('lon'), [fleet('nth')])

    assert 'lon' not in coasts


def test_no_fleets_means_no_coasts():
    assert search_reachable_coasts(GAME_MAP, army('lon'), []) == set()


def test_fleet_not_adjacent_to_origin_is_unused():
    coasts = search_reachable_coasts(GAME_MAP, army('lon'), [fleet('mao')])

    assert coasts == set()


def test_chain_across_several_seas():
    fleets = [fleet('eng'), fleet('mao'), fleet('wes', Power.FRANCE)]

    coasts = search_reachable_coasts(GAME_MAP, army('lon'), fleets)

    assert {'tun', 'naf', 'spa', 'por', 'bre'} <= coasts


def test_broken_chain_stops_early():
    fleets = [fleet('eng'), fleet('wes')]

    coasts = search_reachable_coasts(GAME_MAP, army('lon'), fleets)

    assert 'tun' not in coasts
    assert coasts == {'wal', 'bre', 'pic', 'bel'}


def test_coastal_fleets_do_not_convoy():
    fleets = [fleet('nth'), fleet('den')]

    coasts = search_reachable_coasts(GAME_MAP, army('lon'), fleets)

    assert 'swe' not in coasts
    assert 'kie' not in coasts
