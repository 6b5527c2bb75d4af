"""
Main entry for the World Cup report.

Running this module builds the whole report with the defaults from
`common.constants`:
    - reads `data/WorldCupMatches.csv` (and `data/countries.geojson` for the
        map, if present),
    - computes the six summaries and renders one chart for each,
    - writes `reports/worldcup_report.html`.

Usage:
    python -m worldcup_report.main
    worldcup-report                # console script installed by pyproject

The command takes no options. Other inputs or outputs are a matter of
calling `build_report(ReportConfig(...))` from Python.
"""

from __future__ import annotations
import logging
import sys

from worldcup_report.common.errors import ReportError
from worldcup_report.controllers.report_controller import ReportConfig, build_report

LOG_FORMAT = "[%(levelname)s] %(message)s"


def main() -> int:
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    logger = logging.getLogger(__name__)

    try:
        build_report(ReportConfig())
    except ReportError as exc:
        logger.error("Report generation failed during %s: %s", exc.stage, exc.message)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
