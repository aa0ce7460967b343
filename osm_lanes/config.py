"""
Zentrale Konfiguration für osm_lanes.
"""

# === VERKEHR ===
# True = Rechtsverkehr (Spur 1 liegt innen an der Mittellinie), False = Linksverkehr
RIGHT_HAND_TRAFFIC = True

# === SPUR-GEOMETRIE ===
LANE_WIDTH = 3.25  # Standard-Spurbreite in Metern (wenn kein width-Tag vorhanden)
MIN_SEGMENT_LENGTH = 0.01  # Kürzere Segmente werden bei der Richtungsbestimmung übersprungen

# === JUNCTIONS ===
# Suchradius (Meter) beim Auflösen einer Koordinate auf einen Junction-Knoten
JUNCTION_TOLERANCE = 0.5

# highway-Typen ohne Fahrspuren (werden beim Parsen verworfen)
NON_VEHICLE_HIGHWAYS = {
    "footway",
    "path",
    "steps",
    "cycleway",
    "pedestrian",
    "bridleway",
    "corridor",
    "proposed",
    "construction",
    "platform",
    "elevator",
}

# === AUSGABE ===
VERBOSE = False  # True = Debug-Ausgabe pro Junction

# === VERZEICHNISSE ===
CACHE_DIR = "cache"  # Verzeichnis für Cache-Dateien

# === OVERPASS API ENDPOINTS ===
OVERPASS_ENDPOINTS = [
    "https://overpass-api.de/api/interpreter",
    "https://overpass.kumi.systems/api/interpreter",
    "https://overpass.openstreetmap.ru/api/interpreter",
]
OVERPASS_TIMEOUT = 120  # Sekunden pro Request
OVERPASS_MAX_RETRIES = 3
OVERPASS_BACKOFF = 2.0  # Sekunden, wird pro Versuch mit der Versuchsnummer multipliziert
