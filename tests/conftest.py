import json

import numpy as np
import pandas as pd
import pytest

from worldcup_report.common.utils import clean_matches

RAW_COLUMNS = [
    "Year", "Datetime", "Stage", "Stadium", "City", "Home.Team.Name", "Home.Team.Goals",
    "Away.Team.Goals", "Away.Team.Name", "Win.conditions", "Attendance", "MatchID",
]

RAW_ROWS = [
    [1930, "13 Jul 1930 - 15:00 ", "Group 1", "Pocitos", "Montevideo", "France", 4, 1, "Mexico", "", 4444, 1],
    [1930, "30 Jul 1930 - 14:15", "Final", "Estadio Centenario", "Montevideo", "Uruguay", 4, 2, "Argentina", "", 68346, 2],
    [1994, "17 Jun 1994 - 16:00", "Group C", "Soldier Field", "Chicago", "Germany", 1, 0, "Bolivia", "", 63117, 3],
    [1994, "17 Jul 1994 - 12:30", "Final", "Rose Bowl", "Los Angeles", "Brazil", 0, 0, "Italy",
     "Brazil win on penalties (3 - 2) ", 94194, 4],
    [1994, "18 Jun 1994 - 19:30", "Group E", "Giants Stadium", "New York/New Jersey", "Italy", 0, 1,
     "Republic of Ireland", "", 75338, 5],
    [2014, "12 Jun 2014 - 17:00", "Group A", "Arena de Sao Paulo", "Sao Paulo", "Brazil", 3, 1, "Croatia", "", 62103, 6],
    [2014, "13 Jul 2014 - 16:00", "Final", "Estadio do Maracana", "Rio De Janeiro", "Germany", 1, 0, "Argentina",
     "Germany win after extra time ", 74738, 7],
    [2014, "08 Jul 2014 - 17:00", "Semi-finals", "Estadio Mineirao", "Belo Horizonte", "Brazil", 1, 7, "Germany",
     "", 58141, 8],
    # exact duplicate of match 6, as in the public dataset
    [2014, "12 Jun 2014 - 17:00", "Group A", "Arena de Sao Paulo", "Sao Paulo", "Brazil", 3, 1, "Croatia", "", 62103, 6],
    [2014, "not a date", "Group A", "Estadio das Dunas", "Natal", "Mexico", 1, 0, "Cameroon", "", 39216, 9],
    [np.nan] * 12,
    [2014, "16 Jun 2014 - 13:00", "Group G", "Arena Fonte Nova", "Salvador", "Germany", 4, 0, "Portugal", "", np.nan, 10],
    [2014, "15 Jun 2014 - 19:00", "Group F", "Estadio do Maracana", "Rio De Janeiro", "Argentina", 2, 1,
     'rn">Bosnia and Herzegovina', "", 74738, 11],
]

# rows that survive cleaning: 13 raw - 2 without attendance - 1 duplicate
CLEAN_ROWS = 10


@pytest.fixture
def raw_matches() -> pd.DataFrame:
    return pd.DataFrame(RAW_ROWS, columns=RAW_COLUMNS)


@pytest.fixture
def clean(raw_matches) -> pd.DataFrame:
    return clean_matches(raw_matches)


@pytest.fixture
def csv_path(tmp_path, raw_matches):
    path = tmp_path / "WorldCupMatches.csv"
    raw_matches.to_csv(path, index=False)
    return path


def make_matches(*records) -> pd.DataFrame:
    """Cleaned table from short dicts; unspecified fields get neutral values."""
    base = {
        "year": 2014, "datetime": "12 Jun 2014 - 17:00", "stage": "Group A", "stadium": "Stadium",
        "city": "City", "home_team": "Home", "away_team": "Away", "attendance": 1000,
        "home_goals": 0, "away_goals": 0,
    }
    return clean_matches(pd.DataFrame([{**base, **r} for r in records]))


def _square(x, y, size=10):
    return [[x, y], [x + size, y], [x + size, y + size], [x, y + size], [x, y]]


GEO_FEATURES = [
    ("Uruguay", {"type": "Polygon", "coordinates": [_square(-58, -35)]}),
    ("Brazil", {"type": "Polygon", "coordinates": [_square(-60, -20, 20)]}),
    ("Italy", {"type": "Polygon", "coordinates": [_square(10, 40)]}),
    ("Germany", {"type": "Polygon", "coordinates": [_square(5, 48)]}),
    ("Mexico", {"type": "Polygon", "coordinates": [_square(-105, 15)]}),
    ("United States of America", {"type": "MultiPolygon",
                                  "coordinates": [[_square(-120, 30, 30)], [_square(-160, 55, 15)]]}),
    ("Portugal", {"type": "Polygon", "coordinates": [_square(-9, 37, 4)]}),
    ("Nowhere", {"type": "Point", "coordinates": [0, 0]}),
]


@pytest.fixture
def geojson_path(tmp_path):
    data = {
        "type": "FeatureCollection",
        "features": [
            {"type": "Feature", "properties": {"ADMIN": name}, "geometry": geom}
            for name, geom in GEO_FEATURES
        ],
    }
    path = tmp_path / "countries.geojson"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path
