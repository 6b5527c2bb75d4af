"""
Summary bundle for the report.

`compute_summaries(df)` runs the six aggregations of `common.metrics` over
one cleaned match table and returns them together as a `SummaryBundle`,
one table per report section.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Dict, Iterable

import pandas as pd

from worldcup_report.common.constants import HOST_NATIONS, TALLY_YEAR, TOP_K_MATCHUPS
from worldcup_report.common.metrics import (
    decade_goal_distribution, final_appearances, host_attendance, stage_goal_tally,
    top_matchups_by_attendance, yearly_mean_attendance,
)

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class SummaryBundle:
    """The six summary tables, one per report section."""
    yearly_attendance: pd.DataFrame
    final_appearances: pd.DataFrame
    top_matchups: pd.DataFrame
    goal_tally: pd.DataFrame
    host_attendance: pd.DataFrame
    goal_distribution: pd.DataFrame

    def as_dict(self) -> Dict[str, pd.DataFrame]:
        return {
            "yearly_attendance": self.yearly_attendance,
            "final_appearances": self.final_appearances,
            "top_matchups": self.top_matchups,
            "goal_tally": self.goal_tally,
            "host_attendance": self.host_attendance,
            "goal_distribution": self.goal_distribution,
        }


def compute_summaries(df_matches: pd.DataFrame,
                      tally_year: int = TALLY_YEAR,
                      top_k: int = TOP_K_MATCHUPS,
                      hosts: Iterable[str] = HOST_NATIONS,
                      canonical_matchups: bool = False) -> SummaryBundle:
    # Each summary reads the same cleaned table and builds its own frame;
    # none of them touches `df_matches`.
    bundle = SummaryBundle(
        yearly_attendance=yearly_mean_attendance(df_matches),
        final_appearances=final_appearances(df_matches),
        top_matchups=top_matchups_by_attendance(df_matches, k=top_k, canonical=canonical_matchups),
        goal_tally=stage_goal_tally(df_matches, tally_year),
        host_attendance=host_attendance(df_matches, hosts),
        goal_distribution=decade_goal_distribution(df_matches),
    )
    for name, table in bundle.as_dict().items():
        LOGGER.info("  %-18s %4d rows", name, len(table))
    return bundle
