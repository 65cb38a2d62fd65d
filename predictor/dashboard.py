"""
Dash dashboard: course hub plus interactive grade calculator.

Run with: python -m predictor.dashboard --config predictor_config.yml
"""

import argparse
import sys
from pathlib import Path
from typing import Any, Sequence

from .config import BAND_RANGES, DEFAULT_DASHBOARD_PORT, DEFAULT_INDEX_PATH
from .config_loader import PredictorConfig, load_config
from .course_loader import (
    CourseDataError,
    group_modules_by_term,
    load_course,
    load_index,
    resolve_course_file,
)
from .engine import recompute_all
from .models import (
    ClassificationBand,
    Course,
    CourseIndex,
    GradingPolicy,
    InputState,
    ModuleResult,
    Prediction,
    TaskInput,
)
from .scores_loader import default_input_state

CHECKED = "on"

CARD_STYLE = {
    "padding": "20px",
    "backgroundColor": "white",
    "margin": "20px",
    "borderRadius": "8px",
    "boxShadow": "0 2px 4px rgba(0,0,0,0.1)",
}


def is_checked(value: Sequence[str] | None) -> bool:
    """A one-option dcc.Checklist is checked when its value contains the option."""
    return bool(value) and CHECKED in value


def input_state_from_controls(
    module_ids: Sequence[str],
    module_checks: Sequence[Any],
    task_ids: Sequence[str],
    task_checks: Sequence[Any],
    value_ids: Sequence[str],
    values: Sequence[Any],
) -> InputState:
    """
    Rebuild the input state from the values of the calculator controls.

    Ids and values come in matching order, as Dash delivers them for
    pattern-matching (ALL) inputs.
    """
    state = InputState()
    for module_id, check in zip(module_ids, module_checks):
        state.modules[module_id] = is_checked(check)

    active_by_task = {task_id: is_checked(check) for task_id, check in zip(task_ids, task_checks)}
    value_by_task = dict(zip(value_ids, values))

    for task_id in list(active_by_task) + [t for t in value_by_task if t not in active_by_task]:
        state.tasks[task_id] = TaskInput(
            value=value_by_task.get(task_id),
            active=active_by_task.get(task_id, True),
        )
    return state


def grade_badge_style(result: ModuleResult) -> dict[str, str]:
    """Colour of a module's grade badge."""
    base = {"padding": "4px 10px", "borderRadius": "12px", "fontWeight": "bold"}
    if result.grade is None:
        return {**base, "color": "#999", "backgroundColor": "#eee"}
    if result.grade >= 70:
        return {**base, "color": "#2ecc71", "backgroundColor": "#e8f8f5"}
    if result.grade >= 60:
        return {**base, "color": "#f1c40f", "backgroundColor": "#fef9e7"}
    return {**base, "color": "#555", "backgroundColor": "#eee"}


def band_cell_style(band: str, highlighted: ClassificationBand | None) -> dict[str, str]:
    active = highlighted is not None and highlighted.value == band
    return {
        "flex": "1",
        "textAlign": "center",
        "padding": "10px",
        "margin": "5px",
        "borderRadius": "8px",
        "backgroundColor": "#3498db" if active else "#ecf0f1",
        "color": "white" if active else "#2c3e50",
    }


def prediction_rows(prediction: Prediction) -> list[dict[str, Any]]:
    """Rows for the module grades chart (ignored modules left out)."""
    return [
        {"Module": m.name, "Grade": round(m.grade, 1), "Credits": m.credits, "Term": m.term or ""}
        for m in prediction.modules
        if m.grade is not None
    ]


def task_row_style(active: bool) -> dict[str, str]:
    return {
        "display": "flex",
        "alignItems": "center",
        "marginBottom": "8px",
        "opacity": "1" if active else "0.4",
    }


def calculator_outputs(
    course: Course,
    state: InputState,
    policy: GradingPolicy | None,
    badge_ids: Sequence[str],
    row_ids: Sequence[str],
    value_ids: Sequence[str],
    band_ids: Sequence[str],
) -> dict[str, Any]:
    """
    Recompute the prediction and build the calculator's output values.

    Each list follows the order of the ids it was built from. Badges for
    module ids the course does not know are None (left unchanged).

    Returns:
        Dictionary with the prediction plus badge_text, badge_style,
        row_style, input_disabled, band_style and year_text.
    """
    prediction = recompute_all(course, state, policy)

    results = [prediction.module_result(module_id) for module_id in badge_ids]
    return {
        "prediction": prediction,
        "badge_text": [r.display if r else None for r in results],
        "badge_style": [grade_badge_style(r) if r else None for r in results],
        "row_style": [task_row_style(state.task_input(task_id).active) for task_id in row_ids],
        "input_disabled": [not state.task_input(task_id).active for task_id in value_ids],
        "band_style": [band_cell_style(band, prediction.year.highlighted_band) for band in band_ids],
        "year_text": f"Year average: {prediction.year.display}",
    }


def create_dashboard(
    index: CourseIndex,
    index_path: Path,
    policy: GradingPolicy | None = None,
):
    """
    Create the Dash app.

    Args:
        index: Course index shown on the hub.
        index_path: Path of the index file (course files resolve against it).
        policy: Grading policy for defaults and calculations.
    """
    try:
        import pandas as pd
        import plotly.express as px
        import plotly.graph_objects as go
        from dash import ALL, Dash, ctx, dcc, html, no_update
        from dash.dependencies import Input, Output, State
        from dash.exceptions import PreventUpdate
    except ImportError:
        print("Dashboard requires additional dependencies. Install with:")
        print("  pip install dash pandas plotly")
        sys.exit(1)

    policy = policy or GradingPolicy()
    courses: dict[str, Course] = {}

    app = Dash(__name__, suppress_callback_exceptions=True)

    def render_hub():
        announcement = index.announcement
        sections = []
        for department in index.departments:
            buttons = [
                html.Button(
                    entry.name,
                    id={"type": "course-btn", "index": entry.file or f"unavailable:{entry.name}"},
                    disabled=not entry.available,
                    style={
                        "margin": "5px",
                        "padding": "10px 15px",
                        "borderRadius": "5px",
                        "border": "1px solid #ddd",
                        "cursor": "pointer" if entry.available else "not-allowed",
                        "opacity": "1" if entry.available else "0.5",
                    },
                )
                for entry in department.courses
            ]
            sections.append(html.Div([
                html.H3(department.name, style={"color": "#2c3e50"}),
                html.Div(buttons, style={"display": "flex", "flexWrap": "wrap"}),
            ]))

        return html.Div([
            html.Div([
                html.H3(announcement.title, style={"margin": "0"}),
                html.P(announcement.message),
                html.Small(announcement.footer, style={"color": "#7f8c8d"}),
            ], style=CARD_STYLE),
            html.Div(sections, style=CARD_STYLE),
        ])

    def render_calculator(course: Course, state: InputState):
        band_cells = [
            html.Div([
                html.Strong(band),
                html.Div(band_range, style={"fontSize": "12px"}),
            ], id={"type": "band-cell", "index": band}, style=band_cell_style(band, None))
            for band, band_range in BAND_RANGES.items()
        ]
        summary = html.Div([
            html.H3("Degree Classification", style={"marginTop": "0"}),
            html.Div(band_cells, style={"display": "flex"}),
            html.H2(id="year-average", style={"textAlign": "center", "color": "#2c3e50"}),
            dcc.Graph(id="module-chart"),
        ], style=CARD_STYLE)

        blocks = [summary]
        for term, modules in group_modules_by_term(course):
            blocks.append(html.H2(term, style={"margin": "20px", "color": "#2c3e50"}))
            for module in modules:
                task_rows = []
                for task in module.tasks:
                    task_input = state.task_input(task.id)
                    task_rows.append(html.Div([
                        dcc.Checklist(
                            id={"type": "task-active", "index": task.id},
                            options=[{"label": "", "value": CHECKED}],
                            value=[CHECKED] if task_input.active else [],
                            style={"marginRight": "10px"},
                        ),
                        html.Div([
                            html.Span(task.name, style={"fontWeight": "bold"}),
                            html.Span(f" Weight: {round(task.weight * 100)}%", style={"color": "#7f8c8d"}),
                        ], style={"flex": "1"}),
                        dcc.Input(
                            id={"type": "task-value", "index": task.id},
                            type="number",
                            value=task_input.value,
                            style={"width": "80px", "padding": "5px"},
                        ),
                        html.Span(f" / {task.max_score:g}"),
                    ], id={"type": "task-row", "index": task.id},
                        style=task_row_style(task_input.active)))

                blocks.append(html.Div([
                    html.Div([
                        dcc.Checklist(
                            id={"type": "module-active", "index": module.id},
                            options=[{"label": "", "value": CHECKED}],
                            value=[CHECKED] if state.is_module_active(module.id) else [],
                        ),
                        html.Div([
                            html.Strong(module.name),
                            html.Div(f"Credits: {module.credits:g}", style={"fontSize": "0.8em", "color": "#777"}),
                        ], style={"flex": "1", "marginLeft": "10px"}),
                        html.Span("0%", id={"type": "module-grade", "index": module.id}),
                    ], style={"display": "flex", "alignItems": "center", "marginBottom": "10px"}),
                    html.Div(task_rows),
                ], style=CARD_STYLE))

        return blocks

    app.layout = html.Div([
        html.Div([
            html.H1("Grade Predictor", style={"color": "#2c3e50", "marginBottom": "5px"}),
            html.P(id="course-name", style={"color": "#7f8c8d", "fontSize": "14px"}),
        ], style={"textAlign": "center", "padding": "20px", "backgroundColor": "#ecf0f1"}),
        dcc.Store(id="course-path"),
        html.Div(render_hub(), id="hub-view"),
        html.Div([
            html.Button("Back to courses", id="back-btn", style={"margin": "20px"}),
            html.Div(id="calculator-content"),
        ], id="calculator-view", style={"display": "none"}),
    ], style={"fontFamily": "Arial, sans-serif", "backgroundColor": "#f5f6fa", "minHeight": "100vh"})

    # Navigation between hub and calculator
    @app.callback(
        [Output("hub-view", "style"),
         Output("calculator-view", "style"),
         Output("calculator-content", "children"),
         Output("course-path", "data"),
         Output("course-name", "children")],
        [Input({"type": "course-btn", "index": ALL}, "n_clicks"),
         Input("back-btn", "n_clicks")],
        prevent_initial_call=True,
    )
    def navigate(course_clicks, back_clicks):
        triggered = ctx.triggered_id
        if triggered is None:
            raise PreventUpdate

        if triggered == "back-btn":
            return {"display": "block"}, {"display": "none"}, [], None, ""

        # Buttons are re-rendered with n_clicks=None; ignore those triggers
        if not any(course_clicks):
            raise PreventUpdate

        entry_file = triggered["index"]
        entry = next(
            (e for d in index.departments for e in d.courses if e.file == entry_file),
            None,
        )
        if entry is None:
            raise PreventUpdate

        try:
            course_path = resolve_course_file(index_path, entry)
            course = courses.get(str(course_path)) or load_course(course_path)
        except (FileNotFoundError, CourseDataError) as e:
            content = html.Div(str(e), style={**CARD_STYLE, "color": "#e74c3c"})
            return {"display": "none"}, {"display": "block"}, content, None, entry.name

        courses[str(course_path)] = course
        state = default_input_state(course, policy)
        return (
            {"display": "none"},
            {"display": "block"},
            render_calculator(course, state),
            str(course_path),
            course.name,
        )

    # Full recomputation on every edit
    @app.callback(
        [Output({"type": "module-grade", "index": ALL}, "children"),
         Output({"type": "module-grade", "index": ALL}, "style"),
         Output({"type": "task-row", "index": ALL}, "style"),
         Output({"type": "task-value", "index": ALL}, "disabled"),
         Output({"type": "band-cell", "index": ALL}, "style"),
         Output("year-average", "children"),
         Output("module-chart", "figure")],
        [Input({"type": "module-active", "index": ALL}, "value"),
         Input({"type": "task-active", "index": ALL}, "value"),
         Input({"type": "task-value", "index": ALL}, "value")],
        State("course-path", "data"),
    )
    def recalculate(module_checks, task_checks, values, course_path):
        if not course_path or course_path not in courses:
            raise PreventUpdate

        module_ids = [item["id"]["index"] for item in ctx.inputs_list[0]]
        task_ids = [item["id"]["index"] for item in ctx.inputs_list[1]]
        value_ids = [item["id"]["index"] for item in ctx.inputs_list[2]]

        state = input_state_from_controls(
            module_ids, module_checks, task_ids, task_checks, value_ids, values
        )
        outputs = calculator_outputs(
            courses[course_path],
            state,
            policy,
            badge_ids=[item["id"]["index"] for item in ctx.outputs_list[0]],
            row_ids=[item["id"]["index"] for item in ctx.outputs_list[2]],
            value_ids=[item["id"]["index"] for item in ctx.outputs_list[3]],
            band_ids=[item["id"]["index"] for item in ctx.outputs_list[4]],
        )

        rows = prediction_rows(outputs["prediction"])
        if rows:
            figure = px.bar(
                pd.DataFrame(rows),
                x="Module",
                y="Grade",
                color="Term",
                title="Module Grades",
            ).update_layout(
                xaxis_tickangle=-45,
                plot_bgcolor="white",
                yaxis_title="Grade (%)",
                yaxis_range=[0, 100],
            )
        else:
            figure = go.Figure().update_layout(title="Module Grades", plot_bgcolor="white")

        return (
            [no_update if text is None else text for text in outputs["badge_text"]],
            [no_update if style is None else style for style in outputs["badge_style"]],
            outputs["row_style"],
            outputs["input_disabled"],
            outputs["band_style"],
            outputs["year_text"],
            figure,
        )

    return app


def dashboard_settings(
    index_path: Path | None,
    config_path: Path | None,
    port: int | None,
) -> tuple[Path, GradingPolicy, int]:
    """
    Work out the index, grading policy and port for the dashboard.

    Command-line values win over the configuration file; without a
    configuration file the canonical policy is used.

    Raises:
        FileNotFoundError: If the configuration file doesn't exist.
    """
    config = load_config(config_path) if config_path else PredictorConfig()
    return (
        index_path or config.index_path or DEFAULT_INDEX_PATH,
        config.policy,
        port or config.dashboard_port,
    )


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for the dashboard.

    Returns:
        Exit code.
    """
    parser = argparse.ArgumentParser(
        description="Grade Predictor Dashboard - Course hub and grade calculator"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML configuration file (index path, grading policy, port)",
    )
    parser.add_argument(
        "--index",
        type=Path,
        default=None,
        help=f"Path to the course index JSON (default: {DEFAULT_INDEX_PATH})",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help=f"Port to run the dashboard on (default: {DEFAULT_DASHBOARD_PORT})",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Run in debug mode",
    )

    args = parser.parse_args(argv)

    try:
        index_path, policy, port = dashboard_settings(args.index, args.config, args.port)
    except Exception as e:
        print(f"Error loading configuration: {e}")
        return 1

    try:
        index = load_index(index_path)
    except (FileNotFoundError, CourseDataError) as e:
        print(f"Error: {e}")
        return 1

    print(f"Loaded {sum(len(d.courses) for d in index.departments)} courses from {index_path}")
    print(f"Starting dashboard at http://localhost:{port}")

    app = create_dashboard(index, index_path, policy)
    app.run(debug=args.debug, port=port)

    return 0


if __name__ == "__main__":
    sys.exit(main())
