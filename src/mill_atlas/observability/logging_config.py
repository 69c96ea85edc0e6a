# src/mill_atlas/observability/logging_config.py
"""
Central logging setup: structlog bridged to stdlib logging, rendered by Rich.

Two output formats:
- console: human-friendly panels for development (local time, aligned keys,
  folded long values).
- json   : structured lines for production (ISO-8601 UTC timestamps).

structlog's ProcessorFormatter is used as the bridge, so records emitted by
third-party libraries through stdlib logging (uvicorn, sqlalchemy, httpx)
share the same renderer as application events.
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from typing import TYPE_CHECKING, Any, Literal

import structlog
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from structlog.typing import Processor

if TYPE_CHECKING:
    from mill_atlas.config import MillAtlasConfig

NOISY_LOGGERS = (
    "httpcore",
    "httpx",
    "asyncio",
    "uvicorn.access",
    "sqlalchemy.engine.Engine",
)


class HybridPanelRenderer:
    """
    structlog processor that renders each event as a Rich panel.

    The level label has a fixed width so titles line up, long values fold
    instead of being truncated, and a newline is emitted before the first
    panel so it does not stick to previous terminal output.
    """

    def __init__(
        self,
        *,
        log_level: str = "INFO",
        kv_truncate_at: int = 256,
        show_timestamp: bool = True,
        show_logger_name: bool = True,
        kv_key_width: int = 15,
        panel_padding: tuple[int, int] = (0, 1),
    ) -> None:
        self._console = Console()
        self._log_level = log_level.upper()
        self._kv_truncate_at = kv_truncate_at
        self._show_timestamp = show_timestamp
        self._show_logger_name = show_logger_name
        self._kv_key_width = kv_key_width
        self._panel_padding = panel_padding
        self._is_first_render = True

        self._level_styles: dict[str, tuple[str, str]] = {
            "debug": ("cyan", "DEBUG   "),
            "info": ("green", "INFO    "),
            "warning": ("yellow", "WARNING "),
            "error": ("bold red", "ERROR   "),
            "critical": ("magenta", "CRITICAL"),
        }

    def __call__(
        self, logger: Any, name: str, event_dict: MutableMapping[str, Any]
    ) -> str:
        event_msg = str(event_dict.pop("event", "")).strip()
        if not event_msg:
            return ""

        timestamp = event_dict.pop("timestamp", "")
        level = event_dict.pop("level", "info").lower()
        logger_name = event_dict.pop("logger", "unknown")
        event_dict.pop("_record", None)
        event_dict.pop("_logger", None)

        border_style, level_text = self._level_styles.get(level, ("dim", level.upper()))
        rendered = self._render_as_panel(
            timestamp=timestamp,
            level_text=level_text,
            border_style=border_style,
            logger_name=logger_name,
            event=event_msg,
            kv=event_dict,
        )

        if self._is_first_render and rendered:
            self._is_first_render = False
            return f"\n{rendered}"
        return rendered

    def _format_value(self, value: Any) -> str:
        value_repr = repr(value)
        if len(value_repr) > self._kv_truncate_at or "\n" in value_repr:
            if value_repr[:1] in ("'", '"') and value_repr[-1:] == value_repr[:1]:
                value_repr = value_repr[1:-1]
        return value_repr

    def _render_as_panel(
        self,
        *,
        timestamp: str,
        level_text: str,
        border_style: str,
        logger_name: str,
        event: str,
        kv: MutableMapping[str, Any],
    ) -> str:
        title_parts = [f"[{border_style}]{level_text}[/]"]
        if self._show_logger_name:
            title_parts.append(f"[cyan dim]({logger_name})[/]")
        title = Text.from_markup(" ".join(title_parts))

        renderables: list[Any] = [Text(event, justify="left")]
        if kv:
            kv_table = Table(show_header=False, show_edge=False, box=None, padding=(0, 1))
            kv_table.add_column(style="dim", justify="right", width=self._kv_key_width)
            kv_table.add_column(style="bright_white", overflow="fold")
            for key, value in sorted(kv.items()):
                kv_table.add_row(f"{key} :", Text(self._format_value(value)))
            renderables.append(kv_table)

        subtitle = (
            Text(str(timestamp), style="dim")
            if (self._show_timestamp and timestamp)
            else None
        )

        with self._console.capture() as capture:
            self._console.print(
                Panel(
                    Group(*renderables),
                    title=title,
                    border_style=border_style,
                    subtitle=subtitle,
                    subtitle_align="right",
                    expand=False,
                    title_align="left",
                    padding=self._panel_padding,
                )
            )
        return capture.get().rstrip()


def setup_logging(
    *,
    log_level: str = "INFO",
    log_format: Literal["json", "console"] = "console",
    show_timestamp: bool = True,
    show_logger_name: bool = True,
    root_level: str | None = None,
    service: str | None = None,
    silence_noisy_libs: bool = True,
) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        log_level: minimum level for the `mill_atlas` logger hierarchy.
        log_format: 'console' (Rich panels) or 'json'.
        show_timestamp: show the timestamp as the panel subtitle (console).
        show_logger_name: show the logger name in the panel title (console).
        root_level: root logger level, WARNING when None.
        service: service name bound to every event through contextvars.
        silence_noisy_libs: lower chatty third-party loggers to WARNING.
    """
    pre_chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
    ]

    if log_format == "json":
        timestamper = structlog.processors.TimeStamper(fmt="iso", utc=True)
    else:
        timestamper = structlog.processors.TimeStamper(
            fmt="%Y-%m-%d %H:%M:%S", utc=False
        )

    structlog.configure(
        processors=[
            *pre_chain,
            timestamper,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    if log_format == "console":
        final_renderer: Processor = HybridPanelRenderer(
            log_level=log_level,
            show_timestamp=show_timestamp,
            show_logger_name=show_logger_name,
        )
    else:
        final_renderer = structlog.processors.JSONRenderer()

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=final_renderer,
        foreign_pre_chain=[*pre_chain, timestamper],
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    if root_logger.hasHandlers():
        root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel((root_level or "WARNING").upper())

    app_logger = logging.getLogger("mill_atlas")
    app_logger.setLevel(log_level.upper())
    app_logger.propagate = True

    structlog.contextvars.clear_contextvars()
    if service:
        structlog.contextvars.bind_contextvars(service=service)

    if silence_noisy_libs:
        for noisy in NOISY_LOGGERS:
            logging.getLogger(noisy).setLevel(logging.WARNING)

    structlog.get_logger("mill_atlas.logging_config").debug(
        "Logging configured",
        log_format=log_format,
        app_log_level=log_level.upper(),
        root_log_level=(root_level or "WARNING").upper(),
    )


def setup_logging_from_config(
    cfg: "MillAtlasConfig", *, service: str = "mill-atlas-api"
) -> None:
    """Initialise logging from `cfg.logging` (level and format)."""
    setup_logging(
        log_level=cfg.logging.level,
        log_format=cfg.logging.format,
        service=service,
    )
