"""
Grade Predictor: module grades and degree classification from entered scores

Usage:
  main.py [--config=PATH] [--course=NAME]
  main.py courses [--config=PATH]
  main.py dashboard [--config=PATH]
  main.py (-h | --help)

Options:
  --config=PATH  Path to YAML configuration file [default: predictor_config.yml].
  --course=NAME  Course to predict, by name in the course index (overrides course_path).
  -h --help      Show this screen.
"""

import sys
import webbrowser
from pathlib import Path

from docopt import docopt

from predictor.config import DEFAULT_INDEX_PATH, DEFAULT_REPORTS_DIR
from predictor.config_loader import PredictorConfig, load_config
from predictor.course_loader import (
    CourseDataError,
    group_modules_by_term,
    load_course,
    load_index,
    resolve_course_file,
)
from predictor.engine import recompute_all
from predictor.models import Course, CourseIndex, GradingPolicy, Prediction
from predictor.report import PredictionReport
from predictor.scores_loader import default_input_state, load_scores


def print_hub(index: CourseIndex) -> None:
    """
    Print the course index: announcement, then courses by department.

    Args:
        index: Loaded course index.
    """
    announcement = index.announcement
    if announcement.title:
        print(f"\n  {announcement.title}")
        if announcement.message:
            print(f"  {announcement.message}")
        if announcement.footer:
            print(f"  {announcement.footer}")

    for department in index.departments:
        print(f"\n  {department.name}")
        for entry in department.courses:
            status = "" if entry.available else " (coming soon)"
            print(f"    - {entry.name}{status}")
    print()


def print_prediction(course: Course, prediction: Prediction, verbose: bool = False) -> None:
    """
    Print module grades grouped by term, then the year average.

    Args:
        course: Course the prediction was computed for.
        prediction: Engine output.
        verbose: Also list credits and normalizing weight per module.
    """
    print(f"\n  {'='*50}")
    print(f"  Course: {prediction.course_name}")
    print(f"  {'='*50}")

    for term, modules in group_modules_by_term(course):
        print(f"\n  {term}")
        for module in modules:
            result = prediction.module_result(module.id)
            status = "-" if result.grade is None else "+"
            line = f"  [{status}] {module.name}: {result.display}"
            if verbose:
                line += f"  (credits {module.credits:g}, weight {result.weight_sum:.2f})"
            print(line)

    year = prediction.year
    print(f"\n  Year average: {year.display}")
    if course.total_credits is not None:
        print(f"  Credits counted: {year.credit_sum:g}/{course.total_credits:g}")
    else:
        print(f"  Credits counted: {year.credit_sum:g}")
    print()


def resolve_course_path(config: PredictorConfig, course_name: str | None) -> Path:
    """
    Work out which course file to load.

    Args:
        config: Loaded configuration.
        course_name: Course picked on the command line, looked up in the index.

    Returns:
        Path to the course JSON.

    Raises:
        CourseDataError: If the course is unknown or unavailable.
        ValueError: If neither a course name nor course_path is configured.
    """
    if course_name:
        index_path = config.index_path or DEFAULT_INDEX_PATH
        entry = load_index(index_path).find_course(course_name)
        if entry is None:
            raise CourseDataError(f"Course '{course_name}' not found in {index_path}")
        return resolve_course_file(index_path, entry)

    if config.course_path:
        return config.course_path

    raise ValueError("course_path must be specified in the configuration file (or use --course)")


def run_prediction(
    course_path: Path,
    scores_path: Path | None = None,
    reports_dir: Path | None = None,
    policy: GradingPolicy | None = None,
    verbose: bool = False,
) -> Prediction:
    """
    Load a course, build the input state and run the engine.

    Args:
        course_path: Path to the course JSON.
        scores_path: Optional YAML/JSON file with entered scores.
        reports_dir: Directory for the exported report.
        policy: Grading policy.
        verbose: Print verbose output.

    Returns:
        The computed Prediction.
    """
    policy = policy or GradingPolicy()

    print(f"Loading course from {course_path}...")
    course = load_course(course_path)
    task_count = sum(len(m.tasks) for m in course.modules)
    print(f"Found {len(course.modules)} modules, {task_count} tasks")

    if scores_path:
        print(f"Applying scores from {scores_path}...")
        state = load_scores(scores_path, course, policy)
    else:
        state = default_input_state(course, policy)
        if verbose:
            print(f"No scores file given, using defaults ({policy.default_value.value})")

    prediction = recompute_all(course, state, policy)
    print_prediction(course, prediction, verbose=verbose)

    report = PredictionReport(output_dir=reports_dir or DEFAULT_REPORTS_DIR)
    report.add_prediction(prediction)
    output_files = report.save_all()
    print(f"  Summary JSON: {output_files.get('summary_json')}")
    print(f"  Summary CSV:  {output_files.get('summary_csv')}")

    return prediction


def launch_dashboard(config: PredictorConfig) -> int:
    index_path = config.index_path or DEFAULT_INDEX_PATH
    try:
        index = load_index(index_path)
    except (FileNotFoundError, CourseDataError) as e:
        print(f"Error loading course index: {e}")
        return 1

    from predictor.dashboard import create_dashboard

    try:
        import os
        # Only open browser on the main process, not the reloader
        if not os.environ.get("WERKZEUG_RUN_MAIN"):
            url = f"http://127.0.0.1:{config.dashboard_port}"
            print(f"Opening {url} in browser...")
            webbrowser.open(url)

        app = create_dashboard(index, index_path, policy=config.policy)
        app.run(debug=config.verbose, port=config.dashboard_port)
        return 0
    except Exception as e:
        print(f"Error launching dashboard: {e}")
        return 1


def main(argv: list[str] | None = None) -> int:
    """
    Main CLI entrypoint.

    Returns:
        Exit code (0 for success, 1 for error).
    """
    arguments = docopt(__doc__, argv=argv)
    config_path = Path(arguments["--config"])

    if not config_path.exists():
        print(f"Error: Configuration file not found at {config_path}")
        return 1

    try:
        config = load_config(config_path)
        print(f"Loaded configuration from {config_path}")
    except Exception as e:
        print(f"Error loading config: {e}")
        return 1

    if arguments["courses"]:
        index_path = config.index_path or DEFAULT_INDEX_PATH
        try:
            index = load_index(index_path)
        except (FileNotFoundError, CourseDataError) as e:
            print(f"Error loading course index: {e}")
            return 1
        print_hub(index)
        return 0

    if arguments["dashboard"]:
        return launch_dashboard(config)

    try:
        course_path = resolve_course_path(config, arguments["--course"])
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    try:
        run_prediction(
            course_path=course_path,
            scores_path=config.scores_path,
            reports_dir=config.reports_dir,
            policy=config.policy,
            verbose=config.verbose,
        )
        return 0
    except (FileNotFoundError, CourseDataError) as e:
        print(f"Error loading course: {e}")
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
        return 1
    except Exception as e:
        print(f"\nError: {e}")
        if config.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
