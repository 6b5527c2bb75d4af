"""
Small data model for a match row.

This lightweight dataclass documents the fields of one cleaned World Cup
match. The class is frozen (immutable) so records can be handed to any
analysis without accidental modification.

Column names of the cleaned DataFrame are exactly the field names below.
Aggregations reach them through the `COLS` instance (e.g. `COLS.attendance`)
instead of repeating raw strings, so a renamed field breaks loudly at import
time rather than silently at lookup time.
"""

from __future__ import annotations
from dataclasses import dataclass, fields
from typing import Iterator, Optional

import pandas as pd


@dataclass(frozen=True)
class Match:
        year: Optional[int]
        datetime: Optional[pd.Timestamp]
        stage: Optional[str]
        stadium: Optional[str]
        city: Optional[str]
        home_team: Optional[str]
        away_team: Optional[str]
        attendance: int
        home_goals: Optional[int]
        away_goals: Optional[int]


@dataclass(frozen=True)
class MatchColumns:
    year: str = "year"
    datetime: str = "datetime"
    stage: str = "stage"
    stadium: str = "stadium"
    city: str = "city"
    home_team: str = "home_team"
    away_team: str = "away_team"
    attendance: str = "attendance"
    home_goals: str = "home_goals"
    away_goals: str = "away_goals"


COLS = MatchColumns()

# Cleaned column order, following the dataclass declaration.
MATCH_FIELDS = [f.name for f in fields(Match)]


def _opt_int(val) -> Optional[int]:
    return None if pd.isna(val) else int(val)


def _opt_str(val) -> Optional[str]:
    return None if pd.isna(val) else str(val)


def matches_from_frame(df: pd.DataFrame) -> Iterator[Match]:
    """
    Yield typed `Match` records from a cleaned DataFrame. Only attendance is
    guaranteed by the cleaner; any other missing value becomes `None`.
    """
    for row in df[MATCH_FIELDS].itertuples(index=False):
        yield Match(
            year=_opt_int(row.year),
            datetime=None if pd.isna(row.datetime) else pd.Timestamp(row.datetime),
            stage=_opt_str(row.stage),
            stadium=_opt_str(row.stadium),
            city=_opt_str(row.city),
            home_team=_opt_str(row.home_team),
            away_team=_opt_str(row.away_team),
            attendance=int(row.attendance),
            home_goals=_opt_int(row.home_goals),
            away_goals=_opt_int(row.away_goals),
        )
