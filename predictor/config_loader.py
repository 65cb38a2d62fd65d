"""
Configuration loader for the grade predictor.

Handles parsing and validation of YAML configuration files.
"""

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field

from .config import DEFAULT_DASHBOARD_PORT
from .models import GradingPolicy


class PredictorConfig(BaseModel):
    """
    Configuration model for a prediction run.
    """
    index_path: Optional[Path] = Field(None, description="Path to the course index (hub) JSON")
    course_path: Optional[Path] = Field(None, description="Path to the course JSON to predict")
    scores_path: Optional[Path] = Field(None, description="Path to a YAML/JSON file of entered scores")
    reports_dir: Optional[Path] = Field(None, description="Path to save prediction reports")

    policy: GradingPolicy = Field(default_factory=GradingPolicy, description="Grading rules")

    dashboard_port: int = Field(DEFAULT_DASHBOARD_PORT, description="Port for the dashboard")
    verbose: bool = Field(False, description="Enable verbose output")


def load_config(config_path: Path) -> PredictorConfig:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        PredictorConfig object with loaded values.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        yaml.YAMLError: If config file is invalid YAML.
        ValidationError: If config data is invalid.
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        config_data = yaml.safe_load(f)

    if not config_data:
        return PredictorConfig()

    # Resolve relative paths relative to the config file location
    config_dir = config_path.parent
    for path_field in ["index_path", "course_path", "scores_path", "reports_dir"]:
        if path_field in config_data and config_data[path_field]:
            path = Path(config_data[path_field])
            if not path.is_absolute():
                config_data[path_field] = config_dir / path

    return PredictorConfig(**config_data)
