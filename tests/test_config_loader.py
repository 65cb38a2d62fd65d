import pytest
import yaml
from pydantic import ValidationError

from predictor.config_loader import PredictorConfig, load_config
from predictor.models import DefaultValuePolicy, ModuleAggregation, WeightNormalization


def test_relative_paths_resolve_against_config_dir(tmp_path):
    config_dir = tmp_path / "conf"
    config_dir.mkdir()
    config_path = config_dir / "predictor_config.yml"
    config_path.write_text(yaml.safe_dump({
        "index_path": "data/courses_index.json",
        "course_path": "/abs/course.json",
        "reports_dir": "out",
        "policy": {"default_value": "unset", "normalization": "total", "aggregation": "equal"},
        "dashboard_port": 9000,
    }), encoding="utf-8")

    config = load_config(config_path)
    assert config.index_path == config_dir / "data" / "courses_index.json"
    assert str(config.course_path) == "/abs/course.json"
    assert config.reports_dir == config_dir / "out"
    assert config.scores_path is None
    assert config.policy.default_value == DefaultValuePolicy.UNSET
    assert config.policy.normalization == WeightNormalization.TOTAL
    assert config.policy.aggregation == ModuleAggregation.EQUAL
    assert config.dashboard_port == 9000


def test_empty_config_gives_defaults(tmp_path):
    config_path = tmp_path / "empty.yml"
    config_path.write_text("", encoding="utf-8")
    config = load_config(config_path)
    assert config == PredictorConfig()
    assert config.policy.default_value == DefaultValuePolicy.PASS_MARK
    assert config.policy.suppress_zero_highlight is True


def test_missing_config(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yml")


def test_invalid_policy_value(tmp_path):
    config_path = tmp_path / "bad.yml"
    config_path.write_text("policy:\n  normalization: sometimes\n", encoding="utf-8")
    with pytest.raises(ValidationError):
        load_config(config_path)


def test_bundled_config_loads(data_dir):
    config = load_config(data_dir.parent / "predictor_config.yml")
    assert config.course_path.exists()
    assert config.scores_path.exists()
    assert config.index_path.exists()
