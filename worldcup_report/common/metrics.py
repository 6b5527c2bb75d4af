"""
Summary tables behind each chart of the report.

This module provides one pure function per analysis question. Each takes
the cleaned match table (see `common.utils.clean_matches`) and returns a
small DataFrame ready for `common.plots`:
    - `yearly_mean_attendance`    -> year, mean_attendance
    - `final_appearances`         -> team, appearances, share
    - `top_matchups_by_attendance`-> matchup, mean_attendance, matches
    - `stage_goal_tally`          -> stage, team, home_goals, away_goals, goals
    - `host_attendance`           -> host, mean_attendance, matches
    - `decade_goal_distribution`  -> decade, goals (one row per match)

Function notes:
    - Inputs are never modified; every function builds a new frame.
    - Missing numbers are left out of sums and means instead of turning
        the whole group into NaN (pandas' default `skipna`).
    - Orderings always carry a tie-break on the label so two runs over the
        same input give identical tables.
    - A missing input column raises `AggregationError`: the cleaner
        guarantees them, so this means the schema drifted upstream.
"""

#Import libraries
from __future__ import annotations
import logging
from typing import Iterable, Sequence

import pandas as pd

from .constants import FINAL_STAGE, HOST_NATIONS, TOP_K_MATCHUPS
from .errors import AggregationError
from .utils import sort_stages
from worldcup_report.models.match_model import COLS

LOGGER = logging.getLogger(__name__)

TALLY_COLUMNS = ["stage", "team", "home_goals", "away_goals", "goals"]


# ---------- Small helpers ----------
def _require(df: pd.DataFrame, columns: Sequence[str], what: str) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise AggregationError(f"{what}: missing column(s) {', '.join(missing)}")


def _is(series: pd.Series, value) -> pd.Series:
    """Plain boolean mask for `series == value` (NA compares as False)."""
    return series.eq(value).fillna(False).astype(bool)


def decade_of(year):
    """Round a year (scalar or Series) down to its decade: 1994 -> 1990."""
    return (year // 10) * 10


def matchup_labels(home: pd.Series, away: pd.Series, canonical: bool = False) -> pd.Series:
    """
    "Home vs. Away" labels. With `canonical=True` the pair is written in
    alphabetical order so both legs of a fixture share one label.
    """
    h, a = home.astype(str), away.astype(str)
    if canonical:
        first = h <= a
        h, a = h.where(first, a), a.where(first, h)
    return h + " vs. " + a


# ---------- Summaries ----------
def yearly_mean_attendance(df: pd.DataFrame) -> pd.DataFrame:
    """Mean attendance per tournament year, one row per year present."""
    _require(df, [COLS.year, COLS.attendance], "yearly_mean_attendance")
    out = (
        df.dropna(subset=[COLS.year])
          .groupby(COLS.year)[COLS.attendance]
          .mean()
          .reset_index(name="mean_attendance")
          .sort_values(COLS.year)
          .reset_index(drop=True)
    )
    out[COLS.year] = out[COLS.year].astype(int)
    out["mean_attendance"] = out["mean_attendance"].astype(float)
    return out


def final_appearances(df: pd.DataFrame, stage: str = FINAL_STAGE) -> pd.DataFrame:
    """
    How often each team appears in a final, counted by the home-team name as
    recorded, with its percentage of all final rows.
    """
    _require(df, [COLS.stage, COLS.home_team], "final_appearances")
    finals = df[_is(df[COLS.stage], stage)].dropna(subset=[COLS.home_team])
    total = len(finals)

    counts = (
        finals.groupby(COLS.home_team)
              .size()
              .reset_index(name="appearances")
              .rename(columns={COLS.home_team: "team"})
    )
    counts["team"] = counts["team"].astype(str)
    counts["appearances"] = counts["appearances"].astype(int)
    counts["share"] = counts["appearances"] / total * 100.0 if total else 0.0
    return counts.sort_values(
        by=["appearances", "team"], ascending=[False, True], kind="mergesort"
    ).reset_index(drop=True)


def top_matchups_by_attendance(df: pd.DataFrame,
                               k: int = TOP_K_MATCHUPS,
                               canonical: bool = False) -> pd.DataFrame:
    """Top-k matchups by mean attendance (ties -> label ascending)."""
    _require(df, [COLS.home_team, COLS.away_team, COLS.attendance], "top_matchups_by_attendance")
    pairs = df.dropna(subset=[COLS.home_team, COLS.away_team])
    if pairs.empty:
        return pd.DataFrame(columns=["matchup", "mean_attendance", "matches"])

    labelled = pd.DataFrame({
        "matchup": matchup_labels(pairs[COLS.home_team], pairs[COLS.away_team], canonical=canonical),
        "attendance": pairs[COLS.attendance].astype(float),
    })
    out = (
        labelled.groupby("matchup")["attendance"]
                .agg(mean_attendance="mean", matches="count")
                .reset_index()
                .sort_values(by=["mean_attendance", "matchup"], ascending=[False, True], kind="mergesort")
                .head(k)
                .reset_index(drop=True)
    )
    out["matches"] = out["matches"].astype(int)
    return out


def stage_goal_tally(df: pd.DataFrame, year: int) -> pd.DataFrame:
    """
    Goals per team per stage in one tournament, home and away roles added.

    Each role is summed separately by (stage, team); the two summaries are
    outer-merged so a team seen in only one role keeps its goals (the absent
    role counts as zero).
    """
    _require(df, [COLS.year, COLS.stage, COLS.home_team, COLS.away_team,
                  COLS.home_goals, COLS.away_goals], "stage_goal_tally")
    season = df[_is(df[COLS.year], year)]
    if season.empty:
        LOGGER.warning("No matches recorded for %s; goal tally is empty", year)
        return pd.DataFrame(columns=TALLY_COLUMNS)

    def _role(team_col: str, goals_col: str, name: str) -> pd.DataFrame:
        return (
            season.dropna(subset=[COLS.stage, team_col])
                  .groupby([COLS.stage, team_col])[goals_col]
                  .sum()
                  .reset_index()
                  .rename(columns={COLS.stage: "stage", team_col: "team", goals_col: name})
        )

    home = _role(COLS.home_team, COLS.home_goals, "home_goals")
    away = _role(COLS.away_team, COLS.away_goals, "away_goals")
    tally = home.merge(away, on=["stage", "team"], how="outer")

    tally["stage"] = tally["stage"].astype(str)
    tally["team"] = tally["team"].astype(str)
    for col in ["home_goals", "away_goals"]:
        tally[col] = tally[col].fillna(0).astype(int)
    tally["goals"] = tally["home_goals"] + tally["away_goals"]

    rank = {s: i for i, s in enumerate(sort_stages(tally["stage"]))}
    tally["__s_rank"] = tally["stage"].map(rank)
    tally = tally.sort_values(
        by=["__s_rank", "goals", "team"], ascending=[True, False, True], kind="mergesort"
    )
    return tally.drop(columns=["__s_rank"])[TALLY_COLUMNS].reset_index(drop=True)


def host_attendance(df: pd.DataFrame, hosts: Iterable[str] = HOST_NATIONS) -> pd.DataFrame:
    """
    Mean attendance and match count for matches whose home team is a host
    nation. Every allow-listed host gets a row; hosts without matches carry
    NaN attendance and 0 matches so the map can mark them "no data".
    """
    _require(df, [COLS.home_team, COLS.attendance], "host_attendance")
    hosts = sorted(set(hosts))
    hosted = df[df[COLS.home_team].isin(hosts)]

    stats = (
        hosted.assign(host=hosted[COLS.home_team].astype(str),
                      att=hosted[COLS.attendance].astype(float))
              .groupby("host")["att"]
              .agg(mean_attendance="mean", matches="count")
              .reindex(hosts)
    )
    stats.index.name = "host"
    out = stats.reset_index()
    out["mean_attendance"] = out["mean_attendance"].astype(float)
    out["matches"] = out["matches"].fillna(0).astype(int)
    missing = out.loc[out["matches"] == 0, "host"].tolist()
    if missing:
        LOGGER.debug("Host nations without home matches: %s", ", ".join(missing))
    return out


def decade_goal_distribution(df: pd.DataFrame) -> pd.DataFrame:
    """
    Total goals of every match with its decade. The full distribution is
    kept (not only summary statistics) so the boxplot can derive quartiles
    and outliers itself.
    """
    _require(df, [COLS.year, COLS.home_goals, COLS.away_goals], "decade_goal_distribution")
    scored = df.dropna(subset=[COLS.year, COLS.home_goals, COLS.away_goals])
    out = pd.DataFrame({
        "decade": decade_of(scored[COLS.year]).astype(int),
        "goals": (scored[COLS.home_goals] + scored[COLS.away_goals]).astype(int),
    })
    dropped = len(df) - len(out)
    if dropped:
        LOGGER.debug("Goal distribution skipped %d matches with unknown score", dropped)
    return out.sort_values("decade", kind="mergesort").reset_index(drop=True)


def decade_goal_summary(dist: pd.DataFrame) -> pd.DataFrame:
    """Matches, mean and quartiles of goals per match for each decade."""
    _require(dist, ["decade", "goals"], "decade_goal_summary")
    g = dist.groupby("decade")["goals"]
    out = pd.DataFrame({
        "matches": g.size(),
        "mean": g.mean(),
        "q1": g.quantile(0.25),
        "median": g.median(),
        "q3": g.quantile(0.75),
    })
    return out.reset_index()
