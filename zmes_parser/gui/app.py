from __future__ import annotations

import html
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import ipywidgets as w

from zmes_parser.analysis.measurement_xy import to_measurement_xy
from zmes_parser.ingest.reader import parse_file
from zmes_parser.models.measurement import Measurement
from zmes_parser.models.parameters import Parameter, ParameterValueKind, ZmesFile

from .log_view import HtmlLog


# Keep a single active GUI instance per kernel to avoid duplicated callbacks / stacked widgets.
_ACTIVE_GUI: Optional[w.Widget] = None


@dataclass
class _ViewerState:
    zmes_file: Optional[ZmesFile] = None
    measurements: List[Measurement] = field(default_factory=list)
    record_index: int = 0

    def current_measurement(self) -> Optional[Measurement]:
        if self.zmes_file is None or not self.zmes_file.records:
            return None
        guid = self.zmes_file.records[self.record_index].guid
        for m in self.measurements:
            if m.id == guid:
                return m
        return None


def _get_pyplot():
    """Import pyplot lazily (backend must already be configured)."""
    import matplotlib.pyplot as plt
    return plt


def _format_value(p: Parameter) -> str:
    kind = p.kind
    if kind is ParameterValueKind.ABSENT:
        return ""
    if kind is ParameterValueKind.ARRAY:
        arr = p.value
        if arr.size == 0:
            return "[] (n=0)"
        return f"[{arr[0]:.6g} … {arr[-1]:.6g}] (n={arr.size})"
    return str(p.value)


def render_parameter_tree_html(parameter: Parameter, *, max_depth: int = 6) -> str:
    """Nested <ul> view of a parameter tree (names, then values where present)."""

    def render(p: Parameter, depth: int) -> str:
        label = f"<b>{html.escape(p.name)}</b>"
        value = _format_value(p)
        if value:
            label += f": <code>{html.escape(value)}</code>"
        if not p.children:
            return f"<li>{label}</li>"
        if depth >= max_depth:
            return f"<li>{label} <i>({len(p.children)} children)</i></li>"
        inner = "".join(render(c, depth + 1) for c in p.children)
        return f"<li>{label}<ul>{inner}</ul></li>"

    return f"<ul style='font-size:12px;'>{render(parameter, 0)}</ul>"


def _build_file_panel(state: _ViewerState, log: HtmlLog, on_loaded: Callable[[], None]) -> w.Widget:
    path_box = w.Text(description="File", placeholder=".../measurement.zmes", layout=w.Layout(width="70%"))
    btn_load = w.Button(description="Load", button_style="primary", layout=w.Layout(width="120px"))
    dd_record = w.Dropdown(options=[], description="Record", layout=w.Layout(width="520px"))
    summary = w.HTML()
    tree_view = w.HTML(layout=w.Layout(border="1px solid #ddd", padding="8px", max_height="480px", overflow_y="auto"))

    def _refresh_view() -> None:
        zf = state.zmes_file
        if zf is None or not zf.records:
            tree_view.value = "<i>No record loaded.</i>"
            return
        rec = zf.records[state.record_index]
        group = rec.group.name or rec.group.guid
        counts = log.counts()
        summary.value = (
            f"<b>schema</b> v{zf.schema_version} &nbsp; <b>records</b> {zf.n_records} &nbsp; "
            f"<b>group</b> {html.escape(group)} &nbsp; <b>created</b> {html.escape(rec.created_at)}"
            f" &nbsp; <b>log</b> {counts['warning']} warning(s), {counts['error']} error(s)"
        )
        tree_view.value = render_parameter_tree_html(rec.parameters)

    def _on_record(change) -> None:
        if change.get("new") is None:
            return
        state.record_index = int(change["new"])
        _refresh_view()
        on_loaded()

    def _on_load(_btn) -> None:
        try:
            p = Path(path_box.value).expanduser()
            log.info(f"Loading {p}")
            zf = parse_file(p)
            state.zmes_file = zf
            state.measurements = to_measurement_xy(zf)
            state.record_index = 0
            log.info(f"{zf.n_records} record(s), {len(state.measurements)} size measurement(s).")
            log.warnings(zf.warnings)
            dd_record.options = [(f"{r.id}: {r.guid}", i) for i, r in enumerate(zf.records)]
            if zf.records:
                dd_record.value = 0
            _refresh_view()
            on_loaded()
        except Exception as exc:
            log.error(f"ERROR: {exc!r}")

    btn_load.on_click(_on_load)
    dd_record.observe(_on_record, names="value")
    _refresh_view()

    return w.VBox([w.HBox([path_box, btn_load]), dd_record, summary, tree_view, log.panel])


def build_plot_panel(
    get_measurement: Callable[[], Optional[Measurement]],
) -> Tuple[w.Widget, Callable[[], None]]:
    """
    Plot one dependent variable of the current measurement against x.

    Args:
        get_measurement: returns the Measurement of the selected record (or None).

    Returns:
        (panel, refresh) where refresh() re-reads the current measurement.
    """
    dd_var = w.Dropdown(options=[], description="Variable", layout=w.Layout(width="360px"))
    cb_logx = w.Checkbox(value=True, description="log x")
    btn_plot = w.Button(description="Plot", button_style="primary")
    out_plot = w.Output(layout=w.Layout(border="1px solid #ddd", padding="8px"))
    status = w.HTML("<b>Status:</b> idle")

    def refresh() -> None:
        m = get_measurement()
        if m is None:
            dd_var.options = []
            status.value = "<b>Status:</b> no measurement for this record"
            return
        dd_var.options = [
            (f"{v.symbol}: {v.label}" + (f" [{v.units}]" if v.units else ""), s)
            for s, v in m.variables.items()
            if v.is_dependent
        ]
        dd_var.value = "y"
        status.value = f"<b>Status:</b> {html.escape(m.title or m.id)}"

    def _on_plot(_btn) -> None:
        m = get_measurement()
        if m is None or dd_var.value is None:
            return
        v = m.variables[dd_var.value]
        x = m.x
        n = min(x.n_points, v.n_points)
        out_plot.clear_output(wait=True)
        with out_plot:
            plt = _get_pyplot()
            fig = plt.figure(figsize=(9.0, 4.5))
            ax = fig.add_subplot(1, 1, 1)
            ax.plot(x.data[:n], v.data[:n], label=v.label)
            if cb_logx.value:
                ax.set_xscale("log")
            ax.set_xlabel(f"{x.label} ({x.units})")
            ax.set_ylabel(f"{v.label} ({v.units})" if v.units else v.label)
            ax.set_title(m.title or m.id)
            ax.grid(True, which="both", alpha=0.3)
            ax.legend(loc="best")
            plt.show()

    btn_plot.on_click(_on_plot)

    panel = w.VBox([w.HBox([dd_var, cb_logx, btn_plot]), status, out_plot])
    return panel, refresh


def build_gui() -> w.Tab:
    """
    Notebook viewer for .zmes files: "File" (load + parameter tree) and "Plot" tabs.

    Closes the previous instance created from this module.
    """
    global _ACTIVE_GUI

    if _ACTIVE_GUI is not None:
        _ACTIVE_GUI.close()
        _ACTIVE_GUI = None

    state = _ViewerState()
    log = HtmlLog(title="Log", height_px=160)

    plot_panel, refresh_plot = build_plot_panel(state.current_measurement)
    file_panel = _build_file_panel(state, log, on_loaded=refresh_plot)

    tabs = w.Tab(children=[file_panel, plot_panel])
    tabs.set_title(0, "File")
    tabs.set_title(1, "Plot")

    _ACTIVE_GUI = tabs
    return tabs
