from __future__ import annotations

import html
from collections import Counter, deque
from dataclasses import dataclass
from typing import Deque, Dict, Iterable, List, Literal, Tuple

import ipywidgets as w


Level = Literal["info", "warning", "error"]

# level -> (tag, colour)
_STYLE: Dict[str, Tuple[str, str]] = {
    "info": ("INFO", "#222222"),
    "warning": ("WARN", "#b26a00"),
    "error": ("ERROR", "#b00020"),
}


@dataclass
class LogEntry:
    level: Level
    message: str
    count: int = 1

    def to_html(self) -> str:
        tag, colour = _STYLE[self.level]
        repeat = f" <i>(x{self.count})</i>" if self.count > 1 else ""
        return (
            f"<div style='color:{colour}; white-space:pre-wrap; font-family:monospace;'>"
            f"<b>{tag:<5}</b> {html.escape(self.message)}{repeat}</div>"
        )


class HtmlLog:
    """
    Parser/viewer messages shown in one HTML widget.

    Repeated messages (same level, same text, back to back) collapse into one
    entry with a counter. At most ``max_entries`` entries are kept.
    """

    def __init__(self, *, title: str | None = None, height_px: int = 180, max_entries: int = 500) -> None:
        self._entries: Deque[LogEntry] = deque(maxlen=int(max_entries))
        self._height_px = int(height_px)
        self.widget = w.HTML()
        header = [w.HTML(f"<b>{html.escape(title)}</b>")] if title else []
        self.panel = w.VBox(header + [self.widget]) if header else self.widget
        self._render()

    @property
    def entries(self) -> List[LogEntry]:
        return list(self._entries)

    def counts(self) -> Counter:
        """Number of logged messages per level (repeats included)."""
        out: Counter = Counter()
        for e in self._entries:
            out[e.level] += e.count
        return out

    def info(self, message: str) -> None:
        self.add("info", message)

    def warning(self, message: str) -> None:
        self.add("warning", message)

    def error(self, message: str) -> None:
        self.add("error", message)

    def warnings(self, messages: Iterable[str]) -> None:
        """Log parser warnings (e.g. ZmesFile.warnings), one entry each."""
        for m in messages:
            self.add("warning", m)

    def add(self, level: Level, message: str) -> None:
        text = str(message)
        last = self._entries[-1] if self._entries else None
        if last is not None and (last.level, last.message) == (level, text):
            last.count += 1
        else:
            self._entries.append(LogEntry(level, text))
        self._render()

    def clear(self) -> None:
        self._entries.clear()
        self._render()

    def _render(self) -> None:
        body = "".join(e.to_html() for e in self._entries) or "<div style='color:#666;'>Log is empty.</div>"
        self.widget.value = (
            f"<div style='border:1px solid #ddd; padding:8px; height:{self._height_px}px; "
            f"overflow-y:auto; background:#fff;'>{body}</div>"
        )
