import math

import pandas as pd
import pytest

from worldcup_report.common.errors import AggregationError
from worldcup_report.common.metrics import (
    decade_goal_distribution, decade_goal_summary, decade_of, final_appearances, host_attendance,
    matchup_labels, stage_goal_tally, top_matchups_by_attendance, yearly_mean_attendance,
)
from worldcup_report.controllers.stats_controller import compute_summaries

from conftest import make_matches


# ---------- Yearly mean attendance ----------
def test_yearly_mean_of_two_matches():
    df = make_matches({"year": 1994, "attendance": 1000}, {"year": 1994, "attendance": 2000})
    out = yearly_mean_attendance(df)
    assert out["year"].tolist() == [1994]
    assert out["mean_attendance"].iloc[0] == 1500


def test_yearly_mean_one_row_per_year_sorted(clean):
    out = yearly_mean_attendance(clean)
    assert out["year"].tolist() == [1930, 1994, 2014]
    assert out.loc[0, "mean_attendance"] == pytest.approx((4444 + 68346) / 2)


# ---------- Final appearances ----------
def test_final_shares_sum_to_100():
    df = make_matches(
        {"year": 1994, "stage": "Final", "home_team": "Brazil"},
        {"year": 1982, "stage": "Final", "home_team": "Italy"},
        {"year": 2002, "stage": "Final", "home_team": "Brazil"},
        {"year": 2010, "stage": "Group A", "home_team": "Spain"},
    )
    out = final_appearances(df)
    assert out["share"].sum() == pytest.approx(100.0)
    assert out["team"].tolist() == ["Brazil", "Italy"]
    assert out["appearances"].tolist() == [2, 1]
    assert "Spain" not in out["team"].tolist()


def test_final_ties_ordered_by_name():
    df = make_matches(
        {"stage": "Final", "home_team": "Uruguay"},
        {"stage": "Final", "home_team": "Argentina"},
    )
    assert final_appearances(df)["team"].tolist() == ["Argentina", "Uruguay"]


def test_final_without_finals_is_empty():
    out = final_appearances(make_matches({"stage": "Group A"}))
    assert out.empty
    assert list(out.columns) == ["team", "appearances", "share"]


# ---------- Top matchups ----------
def test_top_matchups_limit_and_order():
    records = [
        {"home_team": f"T{i:02d}", "away_team": "Opp", "attendance": 1000 + 100 * i}
        for i in range(12)
    ]
    df = make_matches(*records)
    out = top_matchups_by_attendance(df, k=10)
    assert len(out) == 10
    means = out["mean_attendance"].tolist()
    assert all(a > b for a, b in zip(means, means[1:]))
    inputs = set(matchup_labels(df["home_team"], df["away_team"]))
    assert set(out["matchup"]) <= inputs
    assert out["matchup"].iloc[0] == "T11 vs. Opp"


def test_top_matchups_mean_and_ties():
    df = make_matches(
        {"home_team": "Brazil", "away_team": "Italy", "attendance": 90000},
        {"home_team": "Brazil", "away_team": "Italy", "attendance": 70000},
        {"home_team": "Argentina", "away_team": "Germany", "attendance": 80000},
    )
    out = top_matchups_by_attendance(df)
    # equal means: label ascending
    assert out["matchup"].tolist() == ["Argentina vs. Germany", "Brazil vs. Italy"]
    assert out["matches"].tolist() == [1, 2]


def test_top_matchups_ordered_pair_by_default():
    df = make_matches(
        {"home_team": "Brazil", "away_team": "Italy", "attendance": 1000},
        {"home_team": "Italy", "away_team": "Brazil", "attendance": 3000},
    )
    assert len(top_matchups_by_attendance(df)) == 2
    canonical = top_matchups_by_attendance(df, canonical=True)
    assert canonical["matchup"].tolist() == ["Brazil vs. Italy"]
    assert canonical["mean_attendance"].iloc[0] == 2000


# ---------- Goal tally ----------
def test_goal_tally_home_only_team_keeps_goals():
    df = make_matches(
        {"year": 2014, "stage": "Group A", "home_team": "Brazil", "away_team": "Croatia",
         "home_goals": 2, "away_goals": 1},
    )
    out = stage_goal_tally(df, 2014)
    brazil = out[out["team"] == "Brazil"].iloc[0]
    assert brazil["home_goals"] == 2 and brazil["away_goals"] == 0
    assert brazil["goals"] == 2
    croatia = out[out["team"] == "Croatia"].iloc[0]
    assert croatia["goals"] == 1


def test_goal_tally_adds_roles_and_filters_year():
    df = make_matches(
        {"year": 2014, "stage": "Group A", "home_team": "Brazil", "away_team": "Croatia",
         "home_goals": 3, "away_goals": 1},
        {"year": 2014, "stage": "Group A", "home_team": "Cameroon", "away_team": "Brazil",
         "home_goals": 1, "away_goals": 4},
        {"year": 2014, "stage": "Final", "home_team": "Germany", "away_team": "Argentina",
         "home_goals": 1, "away_goals": 0},
        {"year": 2010, "stage": "Group A", "home_team": "Brazil", "away_team": "Chile",
         "home_goals": 5, "away_goals": 0},
    )
    out = stage_goal_tally(df, 2014)
    brazil = out[(out["stage"] == "Group A") & (out["team"] == "Brazil")].iloc[0]
    assert brazil["goals"] == 7
    assert "Chile" not in out["team"].tolist()
    # group stage before the final, top scorer first inside a stage
    assert out["stage"].tolist()[0] == "Group A"
    assert out["stage"].tolist()[-2:] == ["Final", "Final"]
    assert out["team"].tolist()[0] == "Brazil"


def test_goal_tally_missing_goals_are_skipped():
    df = make_matches(
        {"home_team": "Brazil", "away_team": "Croatia", "home_goals": None, "away_goals": 1},
        {"home_team": "Brazil", "away_team": "Mexico", "home_goals": 2, "away_goals": 0},
    )
    out = stage_goal_tally(df, 2014)
    assert out.loc[out["team"] == "Brazil", "goals"].iloc[0] == 2


def test_goal_tally_unknown_year_is_empty(clean):
    out = stage_goal_tally(clean, 1800)
    assert out.empty
    assert list(out.columns) == ["stage", "team", "home_goals", "away_goals", "goals"]


# ---------- Host attendance ----------
def test_host_attendance_allow_list_only():
    df = make_matches(
        {"home_team": "Brazil", "attendance": 60000},
        {"home_team": "Brazil", "attendance": 40000},
        {"home_team": "Croatia", "attendance": 30000},
    )
    out = host_attendance(df, hosts=["Brazil", "Uruguay"])
    assert out["host"].tolist() == ["Brazil", "Uruguay"]
    assert "Croatia" not in out["host"].tolist()
    brazil = out.iloc[0]
    assert brazil["mean_attendance"] == 50000 and brazil["matches"] == 2
    uruguay = out.iloc[1]
    assert math.isnan(uruguay["mean_attendance"]) and uruguay["matches"] == 0


# ---------- Goals per decade ----------
def test_decade_of():
    assert decade_of(1994) == 1990
    assert decade_of(1930) == 1930
    assert decade_of(pd.Series([1938, 2014])).tolist() == [1930, 2010]


def test_decade_distribution_keeps_every_match():
    df = make_matches(
        {"year": 1994, "home_goals": 1, "away_goals": 0},
        {"year": 1998, "home_goals": 3, "away_goals": 2},
        {"year": 1930, "home_goals": 4, "away_goals": 1},
        {"year": 1990, "home_goals": None, "away_goals": 1},
    )
    out = decade_goal_distribution(df)
    assert out["decade"].tolist() == [1930, 1990, 1990]
    assert out["goals"].tolist() == [5, 1, 5]


def test_decade_summary():
    dist = pd.DataFrame({"decade": [1990, 1990, 1990, 1930], "goals": [1, 2, 3, 5]})
    out = decade_goal_summary(dist)
    assert out["decade"].tolist() == [1930, 1990]
    row = out.iloc[1]
    assert row["matches"] == 3 and row["median"] == 2 and row["mean"] == 2


# ---------- Contract violations ----------
@pytest.mark.parametrize("func, args", [
    (yearly_mean_attendance, ()),
    (final_appearances, ()),
    (top_matchups_by_attendance, ()),
    (stage_goal_tally, (2014,)),
    (host_attendance, ()),
    (decade_goal_distribution, ()),
])
def test_missing_columns_raise(clean, func, args):
    broken = clean.drop(columns=["attendance", "home_team", "home_goals", "stage"])
    with pytest.raises(AggregationError) as err:
        func(broken, *args)
    assert err.value.stage == "aggregate"


def test_aggregations_do_not_mutate(clean):
    before = clean.copy()
    compute_summaries(clean)
    pd.testing.assert_frame_equal(clean, before)


def test_summaries_are_reproducible(clean):
    first = compute_summaries(clean).as_dict()
    second = compute_summaries(clean).as_dict()
    for name in first:
        pd.testing.assert_frame_equal(first[name], second[name])
