"""
Cache für Overpass-Antworten und die daraus gebauten Straßen.

Jede Cache-Datei ist ein JSON-Umschlag {"kind", "key", "data"}. Der Schlüssel
ist ein Hash der Overpass-Query: ändert sich die Query (BBox, Filter, Timeout),
wird ein neuer Eintrag angelegt statt alte Daten zu liefern.
"""

import hashlib
import json
import os

from .. import config
from ..osm.parser import Road


def query_key(query):
    """Cache-Schlüssel einer Overpass-Query (Whitespace wird normalisiert)."""
    normalized = " ".join(query.split())
    return hashlib.sha1(normalized.encode("utf-8")).hexdigest()[:16]


def cache_path(key, kind, cache_dir=None):
    directory = cache_dir or config.CACHE_DIR
    os.makedirs(directory, exist_ok=True)
    return os.path.join(directory, f"{kind}_{key}.json")


def read_cache(key, kind, cache_dir=None):
    """
    Liest einen Cache-Eintrag.

    Returns:
        Gespeicherte Daten oder None (kein Eintrag, unlesbar oder fremder Schlüssel)
    """
    path = cache_path(key, kind, cache_dir)
    if not os.path.exists(path):
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            envelope = json.load(f)
    except (OSError, ValueError) as e:
        print(f"  [!] Cache {os.path.basename(path)} unlesbar: {e}")
        return None

    if not isinstance(envelope, dict) or envelope.get("key") != key or envelope.get("kind") != kind:
        print(f"  [!] Cache {os.path.basename(path)} passt nicht zur Query, wird ignoriert")
        return None
    print(f"  [OK] {kind} aus Cache geladen ({os.path.basename(path)})")
    return envelope.get("data")


def write_cache(key, kind, data, cache_dir=None):
    """Schreibt einen Cache-Eintrag. Fehler werden gemeldet, nicht geworfen."""
    path = cache_path(key, kind, cache_dir)
    try:
        payload = json.dumps({"kind": kind, "key": key, "data": data})
        with open(path, "w", encoding="utf-8") as f:
            f.write(payload)
    except (OSError, TypeError) as e:
        print(f"  [!] Cache {os.path.basename(path)} nicht gespeichert: {e}")
        return False
    return True


def roads_to_json(roads):
    """Road-Objekte -> JSON-fähige Dicts (Koordinaten bereits metrisch)."""
    return [
        {"id": road.osm_id, "nodes": list(road.nodes), "coords": [[x, y] for x, y in road.coords], "tags": dict(road.tags)}
        for road in roads
    ]


def roads_from_json(items):
    return [
        Road(
            osm_id=item["id"],
            nodes=list(item["nodes"]),
            coords=[(float(x), float(y)) for x, y in item["coords"]],
            tags=dict(item.get("tags", {})),
        )
        for item in items
    ]


def load_osm_file(path):
    """
    Lädt eine Overpass-JSON-Datei.

    Returns:
        Liste der OSM-Elemente (auch wenn die Datei direkt eine Liste enthält)
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        return data.get("elements", [])
    return data
