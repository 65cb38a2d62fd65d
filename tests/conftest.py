import json
from pathlib import Path

import pytest

from predictor.course_loader import parse_course
from predictor.models import InputState, TaskInput

DATA_DIR = Path(__file__).parent.parent / "data"


@pytest.fixture
def data_dir() -> Path:
    return DATA_DIR


@pytest.fixture
def course_data() -> dict:
    """Two modules: a half/half module and a single-task module."""
    return {
        "courseName": "Test Course",
        "year1": {
            "totalCredits": 30,
            "modules": [
                {
                    "id": "alg",
                    "name": "Algebra",
                    "credits": 10,
                    "term": "Term 1",
                    "tasks": [
                        {"id": "alg-cw", "name": "Coursework", "weight": 0.5, "maxScore": 100},
                        {"id": "alg-exam", "name": "Exam", "weight": 0.5, "maxScore": 100},
                    ],
                },
                {
                    "id": "stats",
                    "name": "Statistics",
                    "credits": 20,
                    "term": "Term 2",
                    "tasks": [
                        {"id": "stats-exam", "name": "Exam", "weight": 1.0, "maxScore": 50},
                    ],
                },
            ],
        },
    }


@pytest.fixture
def course(course_data):
    return parse_course(course_data)


@pytest.fixture
def make_state():
    """Build an InputState from {task_id: value} and optional inactive ids."""
    def _make(values: dict, inactive_tasks=(), inactive_modules=()) -> InputState:
        state = InputState()
        for task_id, value in values.items():
            state.tasks[task_id] = TaskInput(value=value, active=task_id not in inactive_tasks)
        for task_id in inactive_tasks:
            if task_id not in state.tasks:
                state.tasks[task_id] = TaskInput(active=False)
        for module_id in inactive_modules:
            state.modules[module_id] = False
        return state

    return _make


@pytest.fixture
def write_json(tmp_path):
    def _write(name: str, data) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write
