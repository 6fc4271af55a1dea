"""Configuration constants for build-log report generation."""
from pathlib import Path
from typing import Tuple

# Project paths
PACKAGE_ROOT = Path(__file__).resolve().parent
TEMPLATE_DIR = PACKAGE_ROOT / "templates"
ENV_LOG_DIR = "FINKREPORT_LOG_DIR"
DEFAULT_LOG_DIR = "logs"

# Analysis output layout
LOGS_DIRNAME = "logs"
RESULTS_DIRNAME = "results"
ANALYZE_MARKER = ".analyzed"

# The results root sits one level below the directory holding logs/
RESULTS_DEPTH = 1

# Report artifacts; entries with these suffixes are never aggregated
EXCLUDED_SUFFIXES: Tuple[str, ...] = (".html", ".txt", ".xml")
CATEGORY_PAGE_SUFFIX = ".html"

REPORT_TEXT = "report.txt"
REPORT_HTML = "report.html"
PACKAGE_INDEX = "pkgindex.html"
MAINTAINER_INDEX = "maintindex.html"

# Rendering
WEIGHT_WIDTH = 4
NBSP = "&nbsp;"
EMAIL_AT_REPLACEMENT = " _at_ "

# Fink environment
FINK_CONFIG_MARKER = Path("etc") / "fink.conf"
FINK_DISTS_DIR = Path("fink") / "dists"
INFO_FILE_SUFFIX = ".info"
UNKNOWN_MAINTAINER = "None"
