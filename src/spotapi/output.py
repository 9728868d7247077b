"""Terminal rendering for the spotapi CLI.

API payloads go to **stdout**; everything else (status lines, cache
diagnostics, warnings, errors) goes to **stderr**, so that
``spotapi --json album ID | jq`` always sees clean JSON.

The active format comes from ``--json``/``--plain`` or, failing those,
``output.format`` in the config file. ``auto`` picks Rich rendering on an
interactive terminal and tab-separated plain text otherwise. Colour is
dropped for ``--no-color``, ``NO_COLOR`` and ``TERM=dumb``.

Paginated payloads (anything with an ``items`` list, such as
``Page[Album]`` or a playlist's track page) are rendered as one row per
item in the plain and Rich formats; JSON always prints the payload as-is.

Library code under :mod:`spotapi.client` and :mod:`spotapi.cache` never
prints. It logs, and :func:`configure_logging` routes those records to
stderr.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


# Nested objects some list endpoints wrap their items in.
_ITEM_WRAPPERS = ("album", "track")


def _item_summary(item: Any) -> tuple[str, str]:
    """Return ``(id, name)`` for one page item, unwrapping saved/playlist entries."""
    if not isinstance(item, dict):
        return "", str(item)
    if "name" not in item:
        for wrapper in _ITEM_WRAPPERS:
            inner = item.get(wrapper)
            if isinstance(inner, dict):
                item = inner
                break
    return str(item.get("id") or ""), str(item.get("name", ""))


def _is_page(data: Any) -> bool:
    return isinstance(data, dict) and isinstance(data.get("items"), list)


class OutputManager:
    """Renders payloads and diagnostics in one of the :class:`OutputFormat` modes.

    Args:
        format: Requested format; ``AUTO`` is resolved here.
        no_color: Disable colour and Rich markup.
        quiet: Hide informational and success lines.
        verbose: Show response cache metadata.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format == OutputFormat.AUTO:
            rich_ok = _is_tty() and not self._no_color
            self._format = OutputFormat.RICH if rich_ok else OutputFormat.PLAIN
        else:
            self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(self._format == OutputFormat.RICH),
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    # ------------------------------------------------------------------ #
    # Payloads (stdout)
    # ------------------------------------------------------------------ #

    def format_response(self, data: Any) -> None:
        """Print a decoded API payload."""
        if self._format == OutputFormat.JSON:
            self._print_line(json.dumps(data, indent=2, ensure_ascii=False))
        elif _is_page(data):
            self._print_page(data)
        elif self._format == OutputFormat.PLAIN:
            self._print_plain(data)
        else:
            text = json.dumps(data, indent=2, ensure_ascii=False)
            self._stdout.print(Syntax(text, "json", theme="monokai", word_wrap=True))

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print rows as a Rich table, JSON records, or tab-separated lines."""
        if self._format == OutputFormat.JSON:
            records = [dict(zip(headers, row)) for row in rows]
            self._print_line(json.dumps(records, indent=2, ensure_ascii=False))
        elif self._format == OutputFormat.PLAIN:
            for row in [headers, *rows]:
                self._print_line("\t".join(row))
        else:
            table = Table(title=title, show_header=True, header_style="bold cyan")
            for header in headers:
                table.add_column(header)
            for row in rows:
                table.add_row(*row)
            self._stdout.print(table)

    def _print_page(self, page: dict[str, Any]) -> None:
        rows = [list(_item_summary(item)) for item in page["items"]]
        if self._format == OutputFormat.PLAIN:
            for row in rows:
                self._print_line("\t".join(row))
            return
        offset = page.get("offset", 0)
        total = page.get("total", len(rows))
        if rows:
            title = f"{offset + 1}-{offset + len(rows)} of {total}"
        else:
            title = f"0 of {total}"
        self.print_table(["id", "name"], rows, title=title)

    def _print_plain(self, data: Any) -> None:
        if isinstance(data, dict):
            for key, value in data.items():
                if isinstance(value, (dict, list)):
                    value = json.dumps(value, ensure_ascii=False)
                self._print_line(f"{key}\t{value}")
        elif isinstance(data, list):
            for item in data:
                self._print_line("\t".join(_item_summary(item)).lstrip("\t"))
        else:
            self._print_line(str(data))

    def _print_line(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def _emit(self, message: str, prefix: str = "", style: str = "") -> None:
        if self._no_color:
            print(f"{prefix}{message}", file=sys.stderr, flush=True)
        elif prefix:
            self._stderr.print(f"[{style}]{prefix}[/{style}]{message}")
        elif style:
            self._stderr.print(f"[{style}]{message}[/{style}]")
        else:
            self._stderr.print(message)

    def info(self, message: str) -> None:
        if not self._quiet:
            self._emit(message)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._emit(message, style="green")

    def warning(self, message: str) -> None:
        """Shown even with ``--quiet``."""
        self._emit(message, prefix="Warning: ", style="yellow")

    def error(self, message: str) -> None:
        self._emit(message, prefix="Error: ", style="bold red")

    def response_info(self, max_age: int, etag: Optional[str], from_cache: bool) -> None:
        """Report where a response came from and how long it stays fresh.

        Only shown with ``--verbose``.
        """
        if not self._verbose:
            return
        source = "cache" if from_cache else "network"
        line = f"{source}: fresh for {max_age}s"
        if etag:
            line = f"{line}, etag {etag}"
        self._emit(line, style="dim")


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set (any value) or ``TERM=dumb``."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


def configure_logging(verbose: bool) -> None:
    """Route ``spotapi`` log records to stderr.

    With *verbose* the package logger is set to DEBUG, otherwise only
    warnings and errors from the client layer are shown.
    """
    logger = logging.getLogger("spotapi")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not any(getattr(h, "_spotapi", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        handler._spotapi = True  # type: ignore[attr-defined]
        logger.addHandler(handler)


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    global _output
    _output = None


def format_response(data: Any) -> None:
    get_output().format_response(data)


def print_table(headers: list[str], rows: list[list[str]], title: Optional[str] = None) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def response_info(max_age: int, etag: Optional[str], from_cache: bool) -> None:
    get_output().response_info(max_age, etag, from_cache)
