"""Country polygons for the host-nation map, read from a local GeoJSON file."""

from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol, Sequence, Union

import numpy as np

from .constants import HOST_REGION_ALIASES

LOGGER = logging.getLogger(__name__)

# A ring is an (N, 2) array of lon/lat vertices; a region is one or more rings.
Ring = np.ndarray

NAME_KEYS = ("name", "NAME", "ADMIN", "admin", "name_long")


class RegionSource(Protocol):
    """What the choropleth needs from a geographic dataset."""

    def names(self) -> List[str]: ...

    def lookup(self, name: str) -> Optional[List[Ring]]: ...


def _key(name: str) -> str:
    return str(name).strip().casefold()


def _exterior_rings(geometry: dict) -> List[Ring]:
    """Outer rings of a Polygon / MultiPolygon (holes are not drawn)."""
    gtype = (geometry or {}).get("type")
    coords = (geometry or {}).get("coordinates") or []
    if gtype == "Polygon":
        polys = [coords]
    elif gtype == "MultiPolygon":
        polys = coords
    else:
        return []
    rings = []
    for poly in polys:
        if poly and len(poly[0]) >= 3:
            rings.append(np.asarray(poly[0], dtype=float)[:, :2])
    return rings


class GeoJSONRegionSource:
    """
    Region polygons read from a GeoJSON FeatureCollection.

    Features are keyed by the first name property found among `name_keys`;
    lookups are case-insensitive. Several features with the same name are
    merged into one region.
    """

    def __init__(self, path: Union[str, Path], name_keys: Sequence[str] = NAME_KEYS):
        self.path = Path(path)
        with self.path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
        if not isinstance(data, dict) or data.get("type") != "FeatureCollection":
            raise ValueError(f"{self.path} is not a GeoJSON FeatureCollection")

        self._names: Dict[str, str] = {}
        self._rings: Dict[str, List[Ring]] = {}
        for feat in data.get("features", []) or []:
            props = feat.get("properties", {}) or {}
            name = next((props[k] for k in name_keys if props.get(k)), None)
            rings = _exterior_rings(feat.get("geometry"))
            if not name or not rings:
                continue
            key = _key(name)
            self._names.setdefault(key, str(name))
            self._rings.setdefault(key, []).extend(rings)
        LOGGER.info("Loaded %d regions from %s", len(self._rings), self.path.name)

    def names(self) -> List[str]:
        return sorted(self._names.values())

    def lookup(self, name: str) -> Optional[List[Ring]]:
        return self._rings.get(_key(name))


class EmptyRegionSource:
    """Stand-in when no polygon file is available: every lookup misses."""

    def names(self) -> List[str]:
        return []

    def lookup(self, name: str) -> Optional[List[Ring]]:
        return None


def load_region_source(path: Optional[Union[str, Path]]) -> RegionSource:
    """GeoJSON regions from `path`, or an empty source if it can't be read."""
    if path is None:
        return EmptyRegionSource()
    try:
        return GeoJSONRegionSource(path)
    except FileNotFoundError:
        LOGGER.warning("Region file not found: %s; the map will show no data", path)
    except (OSError, ValueError) as exc:
        LOGGER.warning("Region file %s unusable (%s); the map will show no data", path, exc)
    return EmptyRegionSource()


def region_name_for(team: str) -> str:
    """Region name under which a team's country appears in the polygon data."""
    return HOST_REGION_ALIASES.get(str(team), str(team))


def unmatched_regions(source: RegionSource, teams: Iterable[str]) -> List[str]:
    """Teams whose country has no polygon in `source`."""
    return [t for t in teams if source.lookup(region_name_for(t)) is None]
