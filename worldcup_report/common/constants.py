from pathlib import Path

PROJECT_ROOT  = Path(__file__).resolve().parents[2]
DATA_PATH     = PROJECT_ROOT / "data" / "WorldCupMatches.csv"
GEO_PATH      = PROJECT_ROOT / "data" / "countries.geojson"
OUTPUT_PATH   = PROJECT_ROOT / "reports" / "worldcup_report.html"

# R-style exports write "Home.Team.Name"; the cleaner turns the dot back into a space.
RAW_COLUMN_SEPARATOR = "."
DATE_FORMAT          = "%d %b %Y - %H:%M"   # e.g. "13 Jul 1930 - 15:00"

# Raw logical column -> cleaned Match field
RAW_COLUMNS = {
    "Year":            "year",
    "Datetime":        "datetime",
    "Stage":           "stage",
    "Stadium":         "stadium",
    "City":            "city",
    "Home Team Name":  "home_team",
    "Away Team Name":  "away_team",
    "Attendance":      "attendance",
    "Home Team Goals": "home_goals",
    "Away Team Goals": "away_goals",
}

FINAL_STAGE    = "Final"
TOP_K_MATCHUPS = 10
TALLY_YEAR     = 2014

# Home-team names of the nations that hosted an edition up to 2014
HOST_NATIONS = [
    "Argentina", "Brazil", "Chile", "England", "France", "Germany", "Germany FR",
    "Italy", "Japan", "Korea Republic", "Mexico", "South Africa", "Spain",
    "Sweden", "Switzerland", "Uruguay", "USA",
]

# Team name -> region name in the polygon dataset, when they differ
HOST_REGION_ALIASES = {
    "England":        "United Kingdom",
    "Germany FR":     "Germany",
    "Korea Republic": "South Korea",
    "USA":            "United States of America",
}

NO_DATA_LABEL = "No data"

FIGSIZE    = (8.0, 4.5)
FIGURE_DPI = 100
