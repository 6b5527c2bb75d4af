"""
Data controller helpers that glue the loading and cleaning utilities to the
report.

This module exposes two convenience functions:
    - `load_match_tables(path)` returns the raw and the cleaned match table.
    - `load_regions(path)` returns the region polygons used by the map.

All heavy lifting (CSV parsing, column normalisation, type coercion, GeoJSON
parsing) is implemented in `common.utils` and `common.geo`. This module
simply composes those helpers so the report controller has one call per
input.
"""

from __future__ import annotations
from pathlib import Path
from typing import Optional, Tuple, Union

import pandas as pd

from worldcup_report.common.constants import DATA_PATH, GEO_PATH
from worldcup_report.common.geo import RegionSource, load_region_source
from worldcup_report.common.utils import clean_matches, load_raw_matches


def load_match_tables(path: Union[str, Path] = DATA_PATH) -> Tuple[pd.DataFrame, pd.DataFrame]:
    # The raw table is returned too so the report header can show how many
    # rows cleaning removed.
    raw = load_raw_matches(path)
    return raw, clean_matches(raw)


def load_regions(path: Optional[Union[str, Path]] = GEO_PATH) -> RegionSource:
    return load_region_source(path)
