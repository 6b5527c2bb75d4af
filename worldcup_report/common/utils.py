"""
Common helpers for reading and cleaning the World Cup match table.

This module contains the two first stages of the report pipeline:
    - `load_raw_matches(path)` reads the delimited file as-is (raw column
        names, raw values) and turns every I/O or parsing problem into a
        `DataLoadError`;
    - `clean_matches(df_raw)` returns a new DataFrame whose columns are the
        `Match` fields, with parsed dates, nullable integer counts and no row
        lacking attendance.

It also keeps the stage ordering helpers (`stage_order`, `group_rank`,
`sort_stages`) used wherever stages are listed in tournament order.
"""

# Import libraries
from __future__ import annotations
import logging
import re
from pathlib import Path
from typing import Iterable, List, Union

import pandas as pd
from pandas.api.types import is_datetime64_any_dtype

from .constants import DATE_FORMAT, RAW_COLUMNS, RAW_COLUMN_SEPARATOR
from .errors import DataLoadError
from worldcup_report.models.match_model import COLS, MATCH_FIELDS

LOGGER = logging.getLogger(__name__)

_INT_COLUMNS  = [COLS.year, COLS.attendance, COLS.home_goals, COLS.away_goals]
_TEXT_COLUMNS = [COLS.stage, COLS.stadium, COLS.city, COLS.home_team, COLS.away_team]

# Some scraped team names keep a fragment of the HTML they were cut from.
_MARKUP_PREFIX = re.compile(r'^rn">')


def load_raw_matches(path: Union[str, Path]) -> pd.DataFrame:
    p = Path(path)
    if not p.is_file():
        raise DataLoadError(f"Match file not found: {p}")
    try:
        df = pd.read_csv(p)
    except pd.errors.EmptyDataError as exc:
        raise DataLoadError(f"Match file is empty: {p}") from exc
    except (pd.errors.ParserError, UnicodeDecodeError) as exc:
        raise DataLoadError(f"Match file is not a readable CSV table: {p} ({exc})") from exc
    except OSError as exc:
        raise DataLoadError(f"Cannot read match file {p}: {exc}") from exc
    LOGGER.info("Loaded %d raw rows x %d columns from %s", len(df), df.shape[1], p.name)
    return df


def normalize_column_names(df: pd.DataFrame, sep: str = RAW_COLUMN_SEPARATOR) -> pd.DataFrame:
    """Return a copy whose column names use spaces instead of `sep`."""
    out = df.copy()
    out.columns = [str(c).replace(sep, " ").strip() for c in out.columns]
    return out


def project_columns(df: pd.DataFrame) -> pd.DataFrame:
    """
    Keep the ten logical columns and rename them to the `Match` fields.

    A column already named after its field (i.e. a table that went through
    the cleaner before) is taken as is.
    """
    rename = {}
    missing = []
    for raw, field in RAW_COLUMNS.items():
        if field in df.columns:
            rename[field] = field
        elif raw in df.columns:
            rename[raw] = field
        else:
            missing.append(raw)
    if missing:
        raise DataLoadError(f"Match table lacks required columns: {', '.join(missing)}")
    return df[list(rename)].rename(columns=rename)[MATCH_FIELDS].copy()


def parse_match_dates(values: pd.Series, fmt: str = DATE_FORMAT) -> pd.Series:
    # Already parsed (second cleaning pass): keep as is.
    if is_datetime64_any_dtype(values):
        return values
    return pd.to_datetime(values.astype("string").str.strip(), format=fmt, errors="coerce")


def _to_count(values: pd.Series) -> pd.Series:
    num = pd.to_numeric(values, errors="coerce").astype(float)
    num = num.where(num >= 0)              # negative counts are data errors
    return num.round().astype("Int64")


def _to_text(values: pd.Series) -> pd.Series:
    return values.astype("string").str.replace(_MARKUP_PREFIX, "", regex=True).str.strip()


def clean_matches(df_raw: pd.DataFrame) -> pd.DataFrame:
    """Return the cleaned match table.

    Steps performed (order matters):
      1. Normalize column names (`Home.Team.Name` -> `Home Team Name`).
      2. Project onto the ten `Match` columns.
      3. Parse `datetime` with `DATE_FORMAT`; bad values become NaT.
      4. Coerce counts to nullable integers and tidy the text columns.
      5. Drop rows without attendance and exact duplicates.

    The input is never modified and cleaning a cleaned table is a no-op.
    """
    df = project_columns(normalize_column_names(df_raw))

    df[COLS.datetime] = parse_match_dates(df[COLS.datetime])
    for col in _INT_COLUMNS:
        df[col] = _to_count(df[col])
    for col in _TEXT_COLUMNS:
        df[col] = _to_text(df[col])

    before = len(df)
    df = df.dropna(subset=[COLS.attendance])
    no_attendance = before - len(df)
    df = df.drop_duplicates().reset_index(drop=True)

    LOGGER.info(
        "Cleaned matches: %d rows kept (%d without attendance, %d duplicates dropped)",
        len(df), no_attendance, before - no_attendance - len(df),
    )
    unparsed = int(df[COLS.datetime].isna().sum())
    if unparsed:
        LOGGER.debug("%d match dates did not match %r", unparsed, DATE_FORMAT)
    return df


def group_rank(name: str) -> int:
    if not name: return 99
    m = re.search(r"Group\s+([A-Z]|\d+)\b", str(name), flags=re.I)
    if m:
        g = m.group(1).upper()
        if g.isdigit():
            return int(g)
        return ord(g) - ord("A") + 1
    return 99

def stage_order(stage: str) -> int:
    s = (stage or "").lower()
    for pattern, val in [(r"group|preliminary|first\s*round",100),(r"round\s*of\s*16|sixteen",200),(r"quarter-?final",300),
                         (r"semi-?final",400),(r"third|3rd",500),(r"final",600)]:
        if re.search(pattern, s): return val
    return 700

def sort_stages(stages: Iterable[str]) -> List[str]:
    """Unique stage names in tournament order (groups by letter/number first)."""
    uniq = {str(s) for s in stages}
    return sorted(uniq, key=lambda s: (stage_order(s), group_rank(s), s))
