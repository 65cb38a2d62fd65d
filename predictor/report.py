"""
Prediction report export.

Saves computed predictions to a folder with JSON and CSV summaries.
"""

import csv
import json
import re
from datetime import datetime
from pathlib import Path

from .config import (
    DEFAULT_REPORTS_DIR,
    SUMMARY_CSV_FILENAME,
    SUMMARY_JSON_FILENAME,
)
from .models import Prediction


class PredictionReport:
    """
    Collects predictions and exports them to various formats.
    """

    def __init__(self, output_dir: Path | None = None) -> None:
        """
        Initialize the report.

        Args:
            output_dir: Directory to save reports. Defaults to ./reports/
        """
        self.output_dir = output_dir or DEFAULT_REPORTS_DIR
        self.predictions: list[Prediction] = []
        self.timestamp = datetime.now().isoformat()

    def add_prediction(self, prediction: Prediction) -> None:
        self.predictions.append(prediction)

    def save_all(self) -> dict[str, Path]:
        """
        Save all predictions to the output directory.

        Creates:
        - Individual JSON files per course (repeated slugs get a _2, _3 suffix)
        - Summary JSON with all predictions
        - Summary CSV with one row per module and one per year average

        Returns:
            Dictionary of output file paths.
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)

        output_files: dict[str, Path] = {}

        used_stems = {Path(SUMMARY_JSON_FILENAME).stem}
        for prediction in self.predictions:
            base = course_slug(prediction.course_name)
            stem, suffix = base, 2
            while stem in used_stems:
                stem = f"{base}_{suffix}"
                suffix += 1
            used_stems.add(stem)

            individual_path = self.output_dir / f"{stem}.json"
            with open(individual_path, "w", encoding="utf-8") as f:
                f.write(prediction.model_dump_json(indent=2))
            key = prediction.course_name if prediction.course_name not in output_files else stem
            output_files[key] = individual_path

        summary_path = self.output_dir / SUMMARY_JSON_FILENAME
        summary_data = {
            "timestamp": self.timestamp,
            "total_courses": len(self.predictions),
            "predictions": [p.model_dump(mode="json") for p in self.predictions],
        }
        with open(summary_path, "w", encoding="utf-8") as f:
            json.dump(summary_data, f, indent=2)
        output_files["summary_json"] = summary_path

        csv_path = self.output_dir / SUMMARY_CSV_FILENAME
        self._save_csv(csv_path)
        output_files["summary_csv"] = csv_path

        return output_files

    def _save_csv(self, csv_path: Path) -> None:
        header = ["course", "module_id", "module", "term", "credits", "included", "grade", "band"]

        with open(csv_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(header)

            for prediction in self.predictions:
                for module in prediction.modules:
                    writer.writerow([
                        prediction.course_name,
                        module.module_id,
                        module.name,
                        module.term or "",
                        module.credits,
                        "Yes" if module.active else "No",
                        f"{module.grade:.1f}" if module.grade is not None else "Ignored",
                        "",
                    ])
                year = prediction.year
                writer.writerow([
                    prediction.course_name,
                    "",
                    "Year average",
                    "",
                    year.credit_sum,
                    "",
                    f"{year.average:.2f}",
                    year.band.value,
                ])


def course_slug(name: str) -> str:
    """File-system friendly version of a course name."""
    slug = re.sub(r"[^A-Za-z0-9]+", "_", name).strip("_").lower()
    return slug or "course"
