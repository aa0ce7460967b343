"""
OSM-LANES - Spur-Konnektivität an Junctions

Lädt Straßen aus einer Overpass-JSON-Datei (oder per BBox von der Overpass API),
löst alle Forks, Merges und Zweirichtungs-Splits auf und gibt die
Spur-Zuordnungen aus.

Benötigte Pakete:
  pip install requests numpy scipy pyproj shapely

Aufruf:
  python resolve_junctions.py --file roads.json
  python resolve_junctions.py --bbox 48.13 11.56 48.14 11.58 --left-hand
"""

import argparse
import sys
import time

from osm_lanes import config
from osm_lanes.io.cache import load_osm_file
from osm_lanes.network import LaneNetwork
from osm_lanes.osm.downloader import get_roads
from osm_lanes.osm.parser import build_roads, extract_roads_from_osm


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Spur-Konnektivität an OSM-Junctions auflösen")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--file", help="Overpass-JSON-Datei ('out geom')")
    source.add_argument("--bbox", nargs=4, type=float, metavar=("LAT_MIN", "LON_MIN", "LAT_MAX", "LON_MAX"))
    parser.add_argument("--left-hand", action="store_true", help="Linksverkehr")
    parser.add_argument("--verbose", action="store_true", help="Ausgabe pro Junction")
    return parser.parse_args(argv)


def main(argv=None):
    """Hauptfunktion - lädt Daten, löst Junctions auf, gibt Ergebnis aus."""
    args = parse_args(argv)
    config.VERBOSE = args.verbose
    start_time = time.time()

    print("=" * 60)
    print("OSM-LANES - Spur-Konnektivität an Junctions")
    print("=" * 60)

    # ===== SCHRITT 1: OSM-Daten laden =====
    print("\n[1] Lade OSM-Daten...")
    if args.file:
        elements = load_osm_file(args.file)
        roads = build_roads(extract_roads_from_osm(elements)) if elements else []
    else:
        roads = get_roads(tuple(args.bbox))
    if not roads:
        print("  [x] Keine OSM-Daten gefunden!")
        return 1

    # ===== SCHRITT 2: Netz aufbauen =====
    print("\n[2] Baue Straßennetz...")
    network = LaneNetwork(roads, right_hand=not args.left_hand)
    print(f"  [OK] {len(network.roads)} Straßen, {len(network.index.junction_nodes)} Junctions")

    # ===== SCHRITT 3: Junctions auflösen =====
    print("\n[3] Löse Junctions auf...")
    resolved = network.resolve_all()
    for node_id, split in sorted(resolved.items()):
        print(f"  Knoten {node_id}: {split.describe()}")
        for road_id, offset in network.junction_offsets(node_id).items():
            if abs(offset) > 1e-6:
                print(f"      Way {road_id}: Junction-Versatz {offset:+.2f} m")

    print()
    network.print_summary()
    print(f"\nFertig in {time.time() - start_time:.2f}s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
