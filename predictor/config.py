"""
Configuration constants for the grade predictor.
"""

from pathlib import Path


# Default values for tasks the student has not touched yet
PASS_MARK_PERCENTAGE: float = 0.40

# Presentation order of term labels. Terms not listed here follow in first-seen order.
TERM_ORDER: list[str] = [
    "Term 1",
    "Term 2",
    "Terms 1 & 2",
    "Terms 2 & 3",
    "Term 3",
    "Full Year",
]
UNKNOWN_TERM: str = "Other"

# Classification thresholds, evaluated top-down (first match wins)
FIRST_THRESHOLD: float = 70.0
UPPER_SECOND_THRESHOLD: float = 60.0
LOWER_SECOND_THRESHOLD: float = 50.0
THIRD_THRESHOLD: float = 40.0

# Band ranges as shown on the summary card
BAND_RANGES: dict[str, str] = {
    "3rd": "40-50%",
    "2:2": "50-60%",
    "2:1": "60-70%",
    "1st": "70%+",
}

MAX_GRADE: float = 100.0

# Default paths (can be overridden in the YAML config)
DEFAULT_CONFIG_FILENAME: str = "predictor_config.yml"
DEFAULT_INDEX_PATH: Path = Path("data/courses_index.json")
DEFAULT_REPORTS_DIR: Path = Path("reports")
SUMMARY_JSON_FILENAME: str = "prediction_summary.json"
SUMMARY_CSV_FILENAME: str = "prediction_summary.csv"

# Dashboard
DEFAULT_DASHBOARD_PORT: int = 8050
