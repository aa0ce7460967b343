"""
Koordinaten-Transformationen (WGS84 ↔ UTM).
"""

import numpy as np
from pyproj import Transformer

# Transformer: GPS (WGS84) <-> UTM Zone 32N (Metrisch fuer Mitteleuropa)
transformer_to_utm = Transformer.from_crs("epsg:4326", "epsg:32632", always_xy=True)
transformer_to_wgs84 = Transformer.from_crs("epsg:32632", "epsg:4326", always_xy=True)


def latlon_to_utm(lats, lons):
    """
    Konvertiert WGS84 nach UTM (Array-fähig).

    Returns:
        N×2 Array mit (x, y) in Metern
    """
    xs, ys = transformer_to_utm.transform(np.asarray(lons, dtype=float), np.asarray(lats, dtype=float))
    return np.column_stack([np.atleast_1d(xs), np.atleast_1d(ys)])


def utm_to_latlon(x, y):
    """Konvertiert einen UTM-Punkt zurück nach (lat, lon)."""
    lon, lat = transformer_to_wgs84.transform(x, y)
    return lat, lon
