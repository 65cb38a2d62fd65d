import pytest
from pydantic import ValidationError

from predictor.course_loader import (
    CourseDataError,
    group_modules_by_term,
    load_course,
    load_index,
    parse_course,
    resolve_course_file,
)
from predictor.models import CourseEntry


def test_parse_year1_layout(course):
    assert course.name == "Test Course"
    assert course.total_credits == 30
    assert [m.id for m in course.modules] == ["alg", "stats"]
    assert course.modules[0].tasks[1].max_score == 100


def test_parse_top_level_modules_and_generated_ids():
    course = parse_course({
        "courseName": "Flat",
        "modules": [
            {"name": "A", "credits": 15, "tasks": [{"name": "Exam", "weight": 1, "maxScore": 100}]},
            {"name": "B", "credits": 15, "tasks": [
                {"name": "CW", "weight": 0.4, "maxScore": 20, "date": "2026-03-01"},
                {"name": "Exam", "weight": 0.6, "maxScore": 100},
            ]},
        ],
    })
    assert course.total_credits is None
    assert [m.id for m in course.modules] == ["m1", "m2"]
    assert [t.id for t in course.modules[1].tasks] == ["m2.t1", "m2.t2"]
    assert course.modules[1].tasks[0].date == "2026-03-01"


def test_missing_max_score_is_kept_as_zero():
    course = parse_course({
        "courseName": "C",
        "modules": [{"name": "A", "credits": 10, "tasks": [{"name": "Quiz", "weight": 0.2}]}],
    })
    assert course.modules[0].tasks[0].max_score == 0


def test_course_is_immutable(course):
    with pytest.raises(ValidationError):
        course.modules[0].credits = 99


@pytest.mark.parametrize("data", [
    [],
    {"courseName": "No modules"},
    {"courseName": "Bad", "year1": {"modules": "nope"}},
    {"courseName": "No tasks", "modules": [{"name": "A", "credits": 10}]},
    {"courseName": "Bad module", "modules": ["A"]},
    {"courseName": "Negative", "modules": [{"name": "A", "credits": -5, "tasks": []}]},
])
def test_structural_errors(data):
    with pytest.raises(CourseDataError):
        parse_course(data)


def test_duplicate_ids_rejected():
    with pytest.raises(CourseDataError, match="duplicate id 'x'"):
        parse_course({
            "courseName": "Dup",
            "modules": [
                {"id": "x", "name": "A", "tasks": []},
                {"id": "x", "name": "B", "tasks": []},
            ],
        })


def test_load_course_from_file(write_json, course_data):
    path = write_json("course.json", course_data)
    course = load_course(path)
    assert course.name == "Test Course"


def test_load_course_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_course(tmp_path / "missing.json")


def test_load_course_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(CourseDataError, match="Could not parse"):
        load_course(path)


def test_group_modules_by_term_orders_known_terms_first():
    course = parse_course({
        "courseName": "Terms",
        "modules": [
            {"name": "Summer School", "term": "Summer", "tasks": []},
            {"name": "Year Project", "term": "Full Year", "tasks": []},
            {"name": "Untermed", "tasks": []},
            {"name": "Autumn", "term": "Term 1", "tasks": []},
            {"name": "Spring", "term": "Term 2", "tasks": []},
        ],
    })
    groups = group_modules_by_term(course)
    assert [term for term, _ in groups] == ["Term 1", "Term 2", "Full Year", "Summer", "Other"]
    assert [m.name for m in groups[-1][1]] == ["Untermed"]


def test_load_index_and_resolve(data_dir):
    index_path = data_dir / "courses_index.json"
    index = load_index(index_path)

    entry = index.find_course("physics (bsc) year 1")
    assert entry is not None and entry.available
    path = resolve_course_file(index_path, entry)
    assert path == data_dir / "courses" / "physics_year1.json"
    assert load_course(path).modules[0].id == "mech"


def test_unavailable_course_cannot_be_resolved(tmp_path):
    with pytest.raises(CourseDataError, match="not available"):
        resolve_course_file(tmp_path / "index.json", CourseEntry(name="Soon"))


def test_bundled_courses_load(data_dir):
    maths = load_course(data_dir / "courses" / "mathematics_year1.json")
    assert maths.total_credits == sum(m.credits for m in maths.modules)
