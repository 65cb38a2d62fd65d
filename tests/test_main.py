import json

import pytest
import yaml

import main
from predictor.config import SUMMARY_CSV_FILENAME, SUMMARY_JSON_FILENAME
from predictor.config_loader import PredictorConfig
from predictor.course_loader import CourseDataError
from predictor.models import ClassificationBand


@pytest.fixture
def config_file(tmp_path, data_dir):
    def _write(**overrides):
        data = {
            "index_path": str(data_dir / "courses_index.json"),
            "course_path": str(data_dir / "courses" / "mathematics_year1.json"),
            "reports_dir": str(tmp_path / "reports"),
        }
        data.update(overrides)
        path = tmp_path / "predictor_config.yml"
        path.write_text(yaml.safe_dump(data), encoding="utf-8")
        return path

    return _write


def test_run_prediction_with_bundled_scores(tmp_path, data_dir, capsys):
    prediction = main.run_prediction(
        course_path=data_dir / "courses" / "mathematics_year1.json",
        scores_path=data_dir / "scores_example.yml",
        reports_dir=tmp_path / "reports",
    )

    computing = next(m for m in prediction.modules if m.name == "Mathematical Computing")
    assert computing.grade is None
    assert prediction.year.credit_sum == 50
    assert (tmp_path / "reports" / SUMMARY_JSON_FILENAME).exists()
    assert (tmp_path / "reports" / SUMMARY_CSV_FILENAME).exists()

    out = capsys.readouterr().out
    assert "Mathematical Computing: Ignored" in out
    assert "Credits counted: 50/60" in out
    # Terms 1 & 2 is listed after Term 2
    assert out.index("Linear Algebra") < out.index("Probability and Statistics") < out.index("Analysis I")


def test_run_prediction_defaults_to_pass_mark(tmp_path, data_dir):
    prediction = main.run_prediction(
        course_path=data_dir / "courses" / "physics_year1.json",
        reports_dir=tmp_path / "reports",
    )
    assert prediction.year.average == pytest.approx(40.0)
    assert prediction.year.band == ClassificationBand.THIRD


def test_main_default_command(config_file, tmp_path, capsys):
    assert main.main(["--config", str(config_file())]) == 0
    out = capsys.readouterr().out
    assert "Year average:" in out

    summary = json.loads((tmp_path / "reports" / SUMMARY_JSON_FILENAME).read_text(encoding="utf-8"))
    assert summary["predictions"][0]["course_name"] == "Mathematics (BSc) Year 1"


def test_main_course_from_index(config_file, capsys):
    assert main.main(["--config", str(config_file()), "--course", "Physics (BSc) Year 1"]) == 0
    assert "Course: Physics (BSc) Year 1" in capsys.readouterr().out


def test_main_unavailable_course(config_file, capsys):
    assert main.main(["--config", str(config_file()), "--course", "Mathematics with Statistics Year 1"]) == 1
    assert "not available" in capsys.readouterr().out


def test_main_courses_command(config_file, capsys):
    assert main.main(["courses", "--config", str(config_file())]) == 0
    out = capsys.readouterr().out
    assert "Welcome to Grade Predictor" in out
    assert "Mathematics with Statistics Year 1 (coming soon)" in out
    assert "- Physics (BSc) Year 1\n" in out


def test_main_missing_config(tmp_path, capsys):
    assert main.main(["--config", str(tmp_path / "nope.yml")]) == 1
    assert "Configuration file not found" in capsys.readouterr().out


def test_main_broken_course_file(config_file, tmp_path, capsys):
    broken = tmp_path / "broken.json"
    broken.write_text('{"courseName": "Broken"}', encoding="utf-8")
    assert main.main(["--config", str(config_file(course_path=str(broken)))]) == 1
    assert "Error loading course" in capsys.readouterr().out


def test_resolve_course_path_requires_a_course():
    with pytest.raises(ValueError):
        main.resolve_course_path(PredictorConfig(), None)


def test_resolve_course_path_unknown_name(data_dir):
    config = PredictorConfig(index_path=data_dir / "courses_index.json")
    with pytest.raises(CourseDataError, match="not found"):
        main.resolve_course_path(config, "Astrophysics")
