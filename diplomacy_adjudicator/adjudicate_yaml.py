#!/usr/bin/env python3
"""
Adjudicate a movement phase from a YAML order file.
Prints the outcome of every order and the provinces left in standoff.
"""

import argparse
import logging
import os
import sys

import yaml

from diplomacy_adjudicator.config import configure_logging, get_map_path
from diplomacy_adjudicator.core.map import MapDataError, load_map
from diplomacy_adjudicator.core.resolver import InvalidOrderError, resolve_movement_phase
from diplomacy_adjudicator.io.yaml_orders import YAMLOrderLoader

logger = logging.getLogger(__name__)


def run(orders_file: str, map_file=None) -> int:
    """Adjudicate one order file and print the results. Returns an exit code."""
    if not os.path.exists(orders_file):
        print(f"Error: Order file not found: {orders_file}")
        return 1

    map_path = map_file or get_map_path()
    try:
        game_map = load_map(map_path)
    except (OSError, MapDataError) as e:
        print(f"Error: Could not load map {map_path}: {e}")
        return 1

    loader = YAMLOrderLoader(game_map)
    try:
        orders = loader.load_orders(orders_file)
    except (OSError, yaml.YAMLError) as e:
        print(f"Error: Could not read orders {orders_file}: {e}")
        return 1

    try:
        result = resolve_movement_phase(orders, game_map)
    except InvalidOrderError as e:
        print(f"Error: {e}")
        return 1

    print(f"\nResults for {orders_file}")
    print("=" * 60)
    for order in result.orders:
        print(f"  {order.power.value:<16} {str(order):<24} {result.move_results[order.key()]}")

    if result.standoffs:
        print(f"\nStandoffs: {', '.join(p.capitalize() for p in result.standoffs)}")
    else:
        print("\nStandoffs: none")

    for correction in loader.get_corrections():
        logger.debug(correction)
    return 0


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description='Adjudicate a Diplomacy movement phase')
    parser.add_argument('orders_file', help='YAML file with units and orders')
    parser.add_argument('--map', dest='map_file', default=None,
                        help='Map YAML file (default: DIPLOMACY_MAP_FILE or the standard map)')
    parser.add_argument('--log-level', default=None,
                        help='Logging level (default: DIPLOMACY_LOG_LEVEL or INFO)')
    args = parser.parse_args()

    configure_logging(args.log_level)
    sys.exit(run(args.orders_file, args.map_file))


if __name__ == "__main__":
    main()
