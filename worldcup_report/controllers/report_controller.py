"""
Report controller: turns the six summaries into one HTML document.

The document is a fixed sequence of sections. Each section asks a question,
shows the chart that answers it (embedded as a base64 PNG so the file is
self-contained), the summary table behind the chart, and a short
commentary. Nothing here computes statistics: tables come from
`controllers.stats_controller` and images from `common.plots`.

The page carries no timestamp, so rebuilding it from an unchanged input
gives the same bytes.
"""

from __future__ import annotations
import base64
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd
from jinja2 import Environment, FileSystemLoader, select_autoescape

from worldcup_report.common.constants import (
    DATA_PATH, GEO_PATH, HOST_NATIONS, OUTPUT_PATH, TALLY_YEAR, TOP_K_MATCHUPS,
)
from worldcup_report.common.errors import ReportWriteError
from worldcup_report.common.metrics import decade_goal_summary
from worldcup_report.common.plots import ChartSpec, MatplotlibRenderer
from worldcup_report.controllers.data_controller import load_match_tables, load_regions
from worldcup_report.controllers.stats_controller import SummaryBundle, compute_summaries
from worldcup_report.models.match_model import COLS

LOGGER = logging.getLogger(__name__)

TEMPLATE_DIR  = Path(__file__).resolve().parents[1] / "templates"
TEMPLATE_NAME = "report.html.j2"
REPORT_TITLE  = "FIFA World Cup 1930-2014: attendance and goals"


@dataclass(frozen=True)
class ReportConfig:
    data_path: Path = DATA_PATH
    geo_path: Optional[Path] = GEO_PATH
    output_path: Path = OUTPUT_PATH
    tally_year: int = TALLY_YEAR
    top_k: int = TOP_K_MATCHUPS
    hosts: tuple = field(default_factory=lambda: tuple(HOST_NATIONS))
    canonical_matchups: bool = False


@dataclass(frozen=True)
class Section:
    key: str            # SummaryBundle field holding the table
    kind: str           # chart kind, see common.plots.CHART_KINDS
    question: str
    commentary: str


SECTIONS: List[Section] = [
    Section(
        key="yearly_attendance",
        kind="line",
        question="How has average match attendance changed from one World Cup to the next?",
        commentary=(
            "Crowds grew with the tournament. After modest pre-war editions, average "
            "attendance jumps in 1950 with the Maracana matches, settles in the "
            "30,000-50,000 range for several decades and peaks in 1994, when the "
            "large American stadiums pushed the average close to 69,000 per match. "
            "Later editions stay well above the historical norm."
        ),
    ),
    Section(
        key="final_appearances",
        kind="pie",
        question="Which teams appear most often in the final?",
        commentary=(
            "Each slice counts the team listed first (as home side) in a final, as a "
            "share of all finals in the data. A handful of football nations from "
            "South America and Europe account for most of the chart; West Germany "
            "and unified Germany are kept apart because the source records them "
            "under different names."
        ),
    ),
    Section(
        key="top_matchups",
        kind="bar",
        question="Which matchups drew the largest average crowds?",
        commentary=(
            "The best attended fixtures are dominated by matches played in very "
            "large venues, notably the 1950 games in Rio de Janeiro and the 1994 "
            "tournament in the United States. Matchups are labelled home side first, "
            "so a pair that met with roles swapped is listed separately."
        ),
    ),
    Section(
        key="goal_tally",
        kind="treemap",
        question="How were the goals of the {tally_year} World Cup spread across stages and teams?",
        commentary=(
            "Each column is a stage, sized by the goals scored in it, and each tile is "
            "a team, sized by its goals in that stage (home and away added). The group "
            "stage holds most of the goals simply because most matches are played "
            "there; in the knockout rounds the tiles concentrate on the few teams "
            "that went deep."
        ),
    ),
    Section(
        key="host_attendance",
        kind="choropleth",
        question="How well attended were the home matches of host nations?",
        commentary=(
            "Countries are shaded by the mean attendance of matches in which a host "
            "nation played as the home side. Hosts are matched by team name, so "
            "this approximates rather than reproduces true hosting records. Grey "
            "hatched areas mark hosts without usable data."
        ),
    ),
    Section(
        key="goal_distribution",
        kind="boxplot",
        question="Has the number of goals per match changed over the decades?",
        commentary=(
            "Early tournaments were high scoring, with medians around four goals and "
            "frequent lopsided results. From the 1960s the distribution tightens and "
            "the median settles between two and three goals per match; the red "
            "points are the outlier matches beyond the whiskers."
        ),
    ),
]


def _question(section: Section, config: ReportConfig) -> str:
    return section.question.format(tally_year=config.tally_year)


def _table_for(section: Section, bundle: SummaryBundle) -> pd.DataFrame:
    table = getattr(bundle, section.key)
    # The boxplot keeps every match; the page shows its per-decade summary.
    if section.key == "goal_distribution":
        return decade_goal_summary(table)
    return table


def _table_html(table: pd.DataFrame) -> str:
    return table.to_html(
        index=False,
        float_format=lambda v: f"{v:,.1f}",
        na_rep="No data",
        classes="summary",
        border=0,
    )


def render_sections(bundle: SummaryBundle,
                    renderer: MatplotlibRenderer,
                    config: ReportConfig) -> List[Dict[str, str]]:
    """Chart, table and prose for each section, in report order."""
    out = []
    for i, section in enumerate(SECTIONS, start=1):
        question = _question(section, config)
        png = renderer.render(ChartSpec(kind=section.kind, title=question, data=getattr(bundle, section.key)))
        out.append({
            "number": str(i),
            "question": question,
            "image": base64.b64encode(png).decode("ascii"),
            "table": _table_html(_table_for(section, bundle)),
            "commentary": section.commentary,
        })
        LOGGER.info("Section %d/%d rendered: %s chart", i, len(SECTIONS), section.kind)
    return out


def _environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(enabled_extensions=("html", "j2")),
        keep_trailing_newline=True,
    )


def render_report_html(sections: List[Dict[str, str]],
                       raw_rows: int,
                       clean: pd.DataFrame) -> str:
    years = clean[COLS.year].dropna()
    context = {
        "title": REPORT_TITLE,
        "raw_rows": raw_rows,
        "clean_rows": len(clean),
        "first_year": int(years.min()) if not years.empty else None,
        "last_year": int(years.max()) if not years.empty else None,
        "sections": sections,
    }
    return _environment().get_template(TEMPLATE_NAME).render(**context)


def write_report(html: str, path: Path) -> Path:
    out = Path(path)
    try:
        out.parent.mkdir(parents=True, exist_ok=True)
        with out.open("w", encoding="utf-8") as handle:
            handle.write(html)
    except OSError as exc:
        raise ReportWriteError(f"Cannot write report to {out}: {exc}") from exc
    return out


def build_report(config: Optional[ReportConfig] = None) -> Path:
    """Run the whole pipeline and return the path of the written report."""
    config = config or ReportConfig()

    LOGGER.info("[1/4] Loading matches from %s", config.data_path)
    raw, matches = load_match_tables(config.data_path)
    regions = load_regions(config.geo_path)

    LOGGER.info("[2/4] Computing summaries")
    bundle = compute_summaries(
        matches,
        tally_year=config.tally_year,
        top_k=config.top_k,
        hosts=config.hosts,
        canonical_matchups=config.canonical_matchups,
    )

    LOGGER.info("[3/4] Rendering charts")
    sections = render_sections(bundle, MatplotlibRenderer(regions), config)

    LOGGER.info("[4/4] Writing report")
    out = write_report(render_report_html(sections, len(raw), matches), config.output_path)
    LOGGER.info("Report written to %s", out)
    return out
