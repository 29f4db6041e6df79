from __future__ import annotations

import argparse
import base64
from dataclasses import dataclass
from typing import Any, Optional

import plotly.graph_objects as go
from dash import ALL, Dash, Input, Output, State, ctx, dcc, html, no_update
from dash.exceptions import PreventUpdate

from excel_analytics_dashboard import config
from excel_analytics_dashboard.core import export
from excel_analytics_dashboard.core.api import RemoteClient
from excel_analytics_dashboard.core.errors import (
    DashboardError,
    SessionExpired,
    StaleResponse,
    TransportError,
    ValidationError,
)
from excel_analytics_dashboard.core.io import dataset_preview_json
from excel_analytics_dashboard.core.session import LOGIN_PATH, SessionContext
from excel_analytics_dashboard.core.state import VARIANT_LABELS, VARIANTS, available_fields, chart_ready
from excel_analytics_dashboard.core.upload import SpreadsheetFile
from excel_analytics_dashboard.dashboard import Dashboard
from excel_analytics_dashboard.plotting.plotly_chart import build_plotly_figure
from excel_analytics_dashboard.utils.log import log_exception
from excel_analytics_dashboard.version import APP_TITLE

try:
    import dash_bootstrap_components as dbc
except Exception:  # pragma: no cover - optional dependency at runtime
    dbc = None

HIDDEN = {"display": "none"}
SHOWN: dict[str, str] = {}
DASHBOARD_PATH = "/dashboard"


def _decode_upload_contents(contents: str | None) -> bytes:
    if not contents:
        raise ValidationError("Please select a file first.")
    if "," not in contents:
        raise ValidationError("Invalid upload payload.")
    _meta, b64 = contents.split(",", 1)
    return base64.b64decode(b64)


def _spreadsheet_from_upload(contents: str | None, filename: str | None) -> Optional[SpreadsheetFile]:
    if not contents or not filename:
        return None
    return SpreadsheetFile(filename=str(filename), content=_decode_upload_contents(contents))


def _status_alert(message: str, kind: str = "info"):
    return dbc.Alert(message, color=kind, dismissable=True, duration=6000, className="mb-3")


def _field_options(dashboard: Dashboard) -> list[dict[str, str]]:
    return [{"label": name, "value": name} for name in available_fields(dashboard.state.dataset)]


def _history_item(entry) -> Any:
    return dbc.ListGroupItem(
        html.Div(
            [
                html.Div(
                    [
                        html.Strong(entry.original_filename or entry.entry_id),
                        html.Br(),
                        html.Small(entry.created_at_display()),
                    ]
                ),
                html.Div(
                    [
                        dbc.Button(
                            "Load",
                            id={"type": "history-load", "index": entry.entry_id},
                            color="primary",
                            size="sm",
                            className="me-2",
                        ),
                        dbc.Button(
                            "Delete",
                            id={"type": "history-delete", "index": entry.entry_id},
                            color="danger",
                            size="sm",
                        ),
                    ],
                    className="d-flex",
                ),
            ],
            className="d-flex justify-content-between align-items-center",
        )
    )


def _login_panel() -> html.Div:
    return html.Div(
        dbc.Card(
            dbc.CardBody(
                [
                    html.H4("Sign in", className="mb-3"),
                    dbc.Input(id="token-input", type="password", placeholder="Bearer token", className="mb-3"),
                    dbc.Button("Continue", id="login-btn", color="primary"),
                ]
            ),
            style={"maxWidth": "420px", "margin": "auto"},
        ),
        id="login-panel",
        className="mt-5",
    )


def _dashboard_panel() -> html.Div:
    return html.Div(
        [
            html.Div(
                dbc.Button("Logout", id="logout-btn", color="danger", outline=True, size="sm"),
                className="text-end mb-3",
            ),
            html.H1(APP_TITLE, className="text-center mb-4"),
            html.Div(id="status-slot"),
            html.Div(
                [
                    dcc.Upload(
                        id="upload-file",
                        accept=config.UPLOAD_ACCEPT,
                        multiple=False,
                        children=html.Div(["Drag and drop or ", html.A("select an Excel file")]),
                        className="form-control mb-2",
                    ),
                    html.Small(id="upload-filename", className="text-muted d-block mb-3"),
                    dbc.Button("Upload Excel File", id="upload-btn", color="primary"),
                ],
                className="mb-4",
            ),
            html.Div(
                [
                    dbc.Row(
                        [
                            dbc.Col([dbc.Label("X-Axis:"), dcc.Dropdown(id="x-select", placeholder="Select")], md=4),
                            dbc.Col([dbc.Label("Y-Axis:"), dcc.Dropdown(id="y-select", placeholder="Select")], md=4),
                            dbc.Col(
                                [
                                    dbc.Label("Chart Type:"),
                                    dcc.Dropdown(
                                        id="variant-select",
                                        options=[{"label": VARIANT_LABELS[v], "value": v} for v in VARIANTS],
                                        value=VARIANTS[0],
                                        clearable=False,
                                    ),
                                ],
                                md=4,
                            ),
                        ],
                        className="mb-3",
                    ),
                    html.Div(
                        [
                            dbc.Card(dcc.Graph(id="chart-graph", figure=go.Figure()), className="p-3 mb-3"),
                            html.Div(
                                [
                                    dbc.Button("Download PNG", id="export-png", color="success", className="me-2"),
                                    dbc.Button("Download PDF", id="export-pdf", color="danger", className="me-2"),
                                    dbc.Button("Download Excel", id="export-xlsx", color="secondary"),
                                ],
                                className="text-center mb-4",
                            ),
                        ],
                        id="chart-section",
                        style={"maxWidth": "600px", "margin": "auto"},
                    ),
                    html.H5("Parsed Data:"),
                    html.Pre(id="data-preview", style={"maxHeight": "300px", "overflowY": "scroll"}),
                ],
                id="controls-section",
                style=HIDDEN,
            ),
            html.Div(
                [
                    html.Div(
                        [
                            html.H5("Upload History", className="mb-0"),
                            dbc.Button("Refresh History", id="history-refresh-btn", color="secondary", outline=True, size="sm"),
                        ],
                        className="d-flex justify-content-between align-items-center mb-2",
                    ),
                    dbc.ListGroup(id="history-list"),
                ],
                id="history-section",
                className="mt-5",
                style=HIDDEN,
            ),
        ],
        id="dashboard-panel",
        className="container mt-5",
    )


def _root_layout() -> html.Div:
    return html.Div(
        [
            dcc.Location(id="url", refresh=False),
            dcc.Store(id="pending-delete"),
            dcc.Download(id="download"),
            dcc.ConfirmDialog(id="delete-confirm", message="Are you sure you want to delete this entry?"),
            _login_panel(),
            _dashboard_panel(),
        ]
    )


def _clicked() -> bool:
    triggered = ctx.triggered[0] if ctx.triggered else {}
    return bool(triggered.get("value"))


@dataclass
class ActionInputs:
    """Component values the dispatch callback reads besides its trigger."""

    x_value: Optional[str] = None
    y_value: Optional[str] = None
    variant_value: Optional[str] = None
    token_value: Optional[str] = None
    upload_contents: Optional[str] = None
    upload_filename: Optional[str] = None
    pending_delete: Optional[str] = None
    clicked: bool = True


@dataclass
class ActionOutcome:
    status: Optional[tuple[str, str]] = None
    confirm_displayed: bool = False
    pending_delete: Optional[str] = None


def page_path(dashboard: Dashboard) -> str:
    return DASHBOARD_PATH if dashboard.session.is_authenticated else LOGIN_PATH


def handle_action(dashboard: Dashboard, trigger: Any, inputs: ActionInputs) -> ActionOutcome:
    """Apply one user action to ``dashboard``.

    ``trigger`` is the Dash ``triggered_id``: a component id string, a
    pattern-matching dict for history buttons, or None on first load.
    Errors become a ``(message, kind)`` status; a Delete click only opens the
    confirm dialog and the delete itself runs on its submit.
    """
    outcome = ActionOutcome(pending_delete=inputs.pending_delete)
    try:
        if trigger is None:
            if dashboard.session.is_authenticated:
                dashboard.open()
        elif trigger == "login-btn":
            dashboard.session.login(inputs.token_value or "")
            dashboard.open()
        elif trigger == "logout-btn":
            dashboard.logout()
        elif trigger == "upload-btn":
            spreadsheet = _spreadsheet_from_upload(inputs.upload_contents, inputs.upload_filename)
            dashboard.upload(spreadsheet, inputs.x_value or "", inputs.y_value or "", inputs.variant_value or "")
            outcome.status = (f"Uploaded {inputs.upload_filename}.", "success")
        elif trigger == "x-select":
            dashboard.set_category_field(inputs.x_value)
        elif trigger == "y-select":
            dashboard.set_value_field(inputs.y_value)
        elif trigger == "variant-select":
            dashboard.set_variant(inputs.variant_value)
        elif trigger == "history-refresh-btn":
            try:
                dashboard.refresh_history()
            except TransportError:
                log_exception("history refresh")
                outcome.status = ("Failed to refresh history.", "warning")
        elif isinstance(trigger, dict) and trigger.get("type") == "history-load":
            if inputs.clicked:
                dashboard.load(str(trigger.get("index")))
        elif isinstance(trigger, dict) and trigger.get("type") == "history-delete":
            if inputs.clicked:
                outcome.pending_delete = str(trigger.get("index"))
                outcome.confirm_displayed = True
        elif trigger == "delete-confirm":
            if inputs.pending_delete:
                outcome.pending_delete = None
                dashboard.delete(inputs.pending_delete, confirm=lambda _entry_id: True)
    except SessionExpired:
        outcome.status = ("Your session has ended. Please sign in again.", "warning")
    except StaleResponse:
        pass
    except ValidationError as exc:
        outcome.status = (str(exc), "warning")
    except TransportError as exc:
        log_exception(f"dashboard action {trigger}")
        if trigger == "upload-btn":
            outcome.status = ("Upload failed. Check server logs.", "danger")
        elif trigger == "delete-confirm":
            outcome.status = (f"Failed to delete entry: {exc}", "danger")
        else:
            outcome.status = (str(exc), "danger")
    except DashboardError as exc:
        outcome.status = (str(exc), "warning")
    return outcome


def create_app(dashboard: Optional[Dashboard] = None) -> Dash:
    if dbc is None:
        raise RuntimeError("The dashboard UI requires `dash` and `dash-bootstrap-components`.")
    dashboard = dashboard or Dashboard()
    app = Dash(
        __name__,
        external_stylesheets=[dbc.themes.BOOTSTRAP],
        suppress_callback_exceptions=True,
        title=APP_TITLE,
    )
    app.layout = _root_layout()
    _register_callbacks(app, dashboard)
    return app


def _register_callbacks(app: Dash, dashboard: Dashboard) -> None:
    @app.callback(
        Output("upload-filename", "children"),
        Input("upload-file", "filename"),
    )
    def _show_selected_file(filename: str | None) -> str:
        return filename or "No file selected"

    @app.callback(
        Output("url", "pathname"),
        Output("login-panel", "style"),
        Output("dashboard-panel", "style"),
        Output("status-slot", "children"),
        Output("controls-section", "style"),
        Output("x-select", "options"),
        Output("x-select", "value"),
        Output("y-select", "options"),
        Output("y-select", "value"),
        Output("variant-select", "value"),
        Output("chart-section", "style"),
        Output("chart-graph", "figure"),
        Output("data-preview", "children"),
        Output("history-section", "style"),
        Output("history-list", "children"),
        Output("delete-confirm", "displayed"),
        Output("pending-delete", "data"),
        Input("login-btn", "n_clicks"),
        Input("logout-btn", "n_clicks"),
        Input("upload-btn", "n_clicks"),
        Input("x-select", "value"),
        Input("y-select", "value"),
        Input("variant-select", "value"),
        Input("history-refresh-btn", "n_clicks"),
        Input({"type": "history-load", "index": ALL}, "n_clicks"),
        Input({"type": "history-delete", "index": ALL}, "n_clicks"),
        Input("delete-confirm", "submit_n_clicks"),
        State("token-input", "value"),
        State("upload-file", "contents"),
        State("upload-file", "filename"),
        State("pending-delete", "data"),
    )
    def _dashboard_actions(
        _n_login: int,
        _n_logout: int,
        _n_upload: int,
        x_value: str | None,
        y_value: str | None,
        variant_value: str | None,
        _n_refresh: int,
        _n_load: list,
        _n_delete: list,
        _n_confirm: int,
        token_value: str | None,
        upload_contents: str | None,
        upload_filename: str | None,
        pending_delete: str | None,
    ):
        trigger = ctx.triggered_id
        inputs = ActionInputs(
            x_value=x_value,
            y_value=y_value,
            variant_value=variant_value,
            token_value=token_value,
            upload_contents=upload_contents,
            upload_filename=upload_filename,
            pending_delete=pending_delete,
            clicked=_clicked(),
        )
        outcome = handle_action(dashboard, trigger, inputs)
        status = _status_alert(*outcome.status) if outcome.status else None

        authenticated = dashboard.session.is_authenticated
        settings = dashboard.state.chart_settings
        has_data = not dashboard.state.dataset.is_empty
        options = _field_options(dashboard)
        ready = chart_ready(dashboard.state) and dashboard.artifact is not None
        figure = build_plotly_figure(dashboard.artifact) if ready else go.Figure()
        history = dashboard.history.entries

        return (
            page_path(dashboard),
            HIDDEN if authenticated else SHOWN,
            SHOWN if authenticated else HIDDEN,
            status,
            SHOWN if has_data else HIDDEN,
            options,
            settings.category_field or None,
            options,
            settings.value_field or None,
            settings.variant,
            {"maxWidth": "600px", "margin": "auto"} if ready else HIDDEN,
            figure,
            dataset_preview_json(dashboard.state.dataset) if has_data else "",
            SHOWN if history else HIDDEN,
            [_history_item(entry) for entry in history],
            outcome.confirm_displayed,
            outcome.pending_delete,
        )

    @app.callback(
        Output("download", "data"),
        Input("export-png", "n_clicks"),
        Input("export-pdf", "n_clicks"),
        Input("export-xlsx", "n_clicks"),
        prevent_initial_call=True,
    )
    def _export_actions(_n_png: int, _n_pdf: int, _n_xlsx: int):
        trigger = ctx.triggered_id
        if trigger == "export-png":
            blob, filename = export.image_bytes(dashboard.surface), config.IMAGE_FILENAME
        elif trigger == "export-pdf":
            blob, filename = export.document_bytes(dashboard.surface), config.DOCUMENT_FILENAME
        elif trigger == "export-xlsx":
            blob, filename = export.table_bytes(dashboard.state.dataset), config.TABLE_FILENAME
        else:
            raise PreventUpdate
        if blob is None:
            return no_update
        return dcc.send_bytes(blob, filename)


def main(token: str | None = None, api_url: str | None = None, **run_kwargs) -> None:
    dashboard = Dashboard(session=SessionContext(token=token or None), client=RemoteClient(api_url))
    app = create_app(dashboard)
    app.run(**run_kwargs)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=f"{APP_TITLE} Dash UI")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8050)
    parser.add_argument("--api-url", default="")
    parser.add_argument("--token", default="")
    parser.add_argument("--debug", dest="debug", action="store_true", default=False)
    args = parser.parse_args()
    main(
        token=args.token,
        api_url=args.api_url or None,
        host=args.host,
        port=args.port,
        debug=args.debug,
    )
