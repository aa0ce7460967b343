"""
Overpass-API-Client: lädt die highway-Ways einer BBox und baut daraus Straßen.
"""

import time

import requests

from .. import config
from ..io.cache import query_key, read_cache, roads_from_json, roads_to_json, write_cache
from .parser import build_roads, extract_roads_from_osm

# Antworten, bei denen derselbe Server später nochmal gefragt wird
RETRY_STATUS = {429, 502, 503, 504}


def build_query(bbox):
    """Overpass-Query für alle highway-Ways inkl. Knoten-IDs und Geometrie."""
    return f"""
    [out:json][timeout:90];
    way["highway"]({bbox[0]},{bbox[1]},{bbox[2]},{bbox[3]});
    out geom;
    """


def _fetch_from(session, url, query):
    """
    Fragt einen Server, bis zu OVERPASS_MAX_RETRIES mal.

    Timeouts, Verbindungsfehler und RETRY_STATUS führen zu einem neuen Versuch
    (Wartezeit wächst linear). Andere HTTP-Fehler und kaputtes JSON werden
    an den Aufrufer weitergereicht.

    Returns:
        Liste der Elemente oder None, wenn alle Versuche gescheitert sind
    """
    retries = config.OVERPASS_MAX_RETRIES
    for attempt in range(1, retries + 1):
        try:
            response = session.post(url, data={"data": query}, timeout=config.OVERPASS_TIMEOUT)
        except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as e:
            reason = type(e).__name__
        else:
            if response.status_code not in RETRY_STATUS:
                response.raise_for_status()
                return response.json().get("elements", [])
            reason = f"HTTP {response.status_code}"

        if attempt < retries:
            delay = config.OVERPASS_BACKOFF * attempt
            print(f"  [!] {url}: {reason}, Versuch {attempt}/{retries}, warte {delay:.0f}s")
            time.sleep(delay)
        else:
            print(f"  [x] {url}: {reason}, gebe Server auf")
    return None


def download_elements(query, session):
    """Probiert alle OVERPASS_ENDPOINTS der Reihe nach. Leere Liste, wenn keiner liefert."""
    for url in config.OVERPASS_ENDPOINTS:
        try:
            elements = _fetch_from(session, url, query)
        except (requests.exceptions.RequestException, ValueError) as e:
            print(f"  [x] {url}: {e}")
            continue
        if elements is not None:
            print(f"  [OK] {len(elements)} OSM-Elemente von {url}")
            return elements
    print("  [x] Kein Overpass-Server hat geantwortet")
    return []


def get_osm_data(bbox, use_cache=True):
    """
    Holt alle highway-Ways einer BBox (Cache oder Overpass API).

    Args:
        bbox: (lat_min, lon_min, lat_max, lon_max)
        use_cache: False = Cache weder lesen noch schreiben

    Returns:
        Liste der OSM-Elemente (leer, wenn alle Server fehlschlagen)
    """
    query = build_query(bbox)
    key = query_key(query)
    if use_cache:
        cached = read_cache(key, "osm_elements")
        if cached is not None:
            return cached

    print(f"  Overpass-Abfrage für BBox {bbox}...")
    with requests.Session() as session:
        elements = download_elements(query, session)

    # Fehlschläge werden nicht gecacht
    if use_cache and elements:
        write_cache(key, "osm_elements", elements)
    return elements


def get_roads(bbox, use_cache=True):
    """
    Straßen einer BBox als Road-Objekte.

    Die geparsten Straßen werden unter demselben Query-Schlüssel gecacht,
    ein zweiter Aufruf braucht weder Download noch Projektion.
    """
    key = query_key(build_query(bbox))
    if use_cache:
        cached = read_cache(key, "roads")
        if cached is not None:
            return roads_from_json(cached)

    roads = build_roads(extract_roads_from_osm(get_osm_data(bbox, use_cache=use_cache)))
    if use_cache and roads:
        write_cache(key, "roads", roads_to_json(roads))
    return roads
