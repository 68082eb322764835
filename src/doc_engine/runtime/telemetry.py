"""Telemetry services built directly on loguru.

This module exposes a narrow surface area for the rest of the engine:

``configure(...)`` -- install (or drop) the engine's loguru sinks
``get_logger(name)`` -- fetch (and cache) a logger bound to a component
``record_event(name, ...)`` -- emit structured events at a chosen level
``span(name, ...)`` -- context manager marrying timing + component tagging

The engine's records are disabled until logging is configured, either
explicitly or through the ``DOC_ENGINE_*`` environment variables.
"""

from __future__ import annotations

import os
import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, MutableMapping, Optional

from loguru import logger as _loguru

ENV_PREFIX = "DOC_ENGINE_"
PACKAGE = "doc_engine"
DEFAULT_LOGGER_NAME = os.getenv(f"{ENV_PREFIX}LOGGER", PACKAGE)
DEFAULT_LOG_FILE = os.getenv(f"{ENV_PREFIX}LOG_FILE", "")

_LOGGER_CACHE: MutableMapping[str, Any] = {}
_HANDLER_IDS: List[int] = []
_DEFAULT_HANDLER: Dict[str, bool] = {"removed": False}


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


def _env_flag(name: str, default: bool) -> bool:
    raw = _env(name)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "on"}


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    return repr(value) if isinstance(value, (dict, list, tuple, set)) else str(value)


def _resolve_level(level: Any) -> str:
    name = str(level).upper()
    if name == "WARN":
        name = "WARNING"
    try:
        _loguru.level(name)
    except ValueError:
        raise ValueError(f"Unsupported log level '{level}'.") from None
    return name


def _format_record(record: Dict[str, Any]) -> str:
    component = record["extra"].get("component", PACKAGE)
    span_name = record["extra"].get("span")
    span_str = f" [{span_name}]" if span_name else ""
    return (
        "<green>{time:HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        f"<cyan>{component}</cyan>{span_str} | "
        "<level>{message}</level>\n"
        "{exception}"
    )


@dataclass
class _Settings:
    enabled: bool = False
    level: str = "INFO"
    console: bool = True
    colorize: bool = True
    json_logs: bool = False
    log_file: str = ""
    sink: Optional[Any] = None


def _preset_settings(preset: str) -> _Settings:
    key = preset.lower()
    if key == "development":
        return _Settings(enabled=True, level="DEBUG", console=True, colorize=True)
    if key == "production":
        log_path = _env("LOG_FILE", DEFAULT_LOG_FILE) or "doc_engine.log"
        return _Settings(enabled=True, level="INFO", console=False, log_file=log_path)
    if key in {"performance", "performance_analysis"}:
        log_path = _env("LOG_FILE", DEFAULT_LOG_FILE) or "doc_engine-performance.log"
        return _Settings(
            enabled=True,
            level="DEBUG",
            console=False,
            json_logs=True,
            log_file=log_path,
        )
    raise ValueError(f"Unknown preset '{preset}'.")


def _env_settings() -> _Settings:
    level = _env("LOG_LEVEL")
    log_file = _env("LOG_FILE") or DEFAULT_LOG_FILE
    return _Settings(
        enabled=_env_flag("LOG_ENABLED", bool(level or log_file)),
        level=(level or "INFO").upper(),
        console=not _env_flag("DISABLE_CONSOLE", False),
        colorize=not _env_flag("NO_COLOR", False),
        json_logs=_env_flag("LOG_JSON", False),
        log_file=log_file,
    )


def _drop_handlers() -> None:
    while _HANDLER_IDS:
        _loguru.remove(_HANDLER_IDS.pop())


def _drop_default_handler() -> None:
    """Remove loguru's stock stderr handler (id 0) on first enable.

    Left in place it would echo every engine record to the console whatever
    sinks were configured.
    """

    if _DEFAULT_HANDLER["removed"]:
        return
    _DEFAULT_HANDLER["removed"] = True
    try:
        _loguru.remove(0)
    except ValueError:
        # Already removed by the host application.
        pass


def configure(
    *,
    preset: Optional[str] = None,
    level: Optional[str] = None,
    sink: Optional[Callable[..., Any]] = None,
    json_logs: Optional[bool] = None,
    enabled: Optional[bool] = None,
) -> None:
    """Replace the engine's loguru sinks.

    Parameters
    ----------
    preset:
        Named preset (``"development"``, ``"production"``, ``"performance"``).
        Without one, settings come from the ``DOC_ENGINE_*`` environment.
    level:
        Minimum level for every sink installed by this call.
    sink:
        Extra loguru sink (callable, stream or path). Passing a sink enables
        logging unless ``enabled=False`` is given.
    json_logs:
        Serialize records as JSON instead of the human-readable format.
    enabled:
        Force the engine's records on or off.
    """

    settings = _preset_settings(preset) if preset else _env_settings()
    if level is not None:
        settings.level = _resolve_level(level)
    if json_logs is not None:
        settings.json_logs = json_logs
    if sink is not None:
        settings.sink = sink
        settings.console = False
        settings.enabled = True
    if enabled is not None:
        settings.enabled = enabled

    _drop_handlers()
    _LOGGER_CACHE.clear()

    if not settings.enabled:
        _loguru.disable(PACKAGE)
        return

    _drop_default_handler()
    _loguru.enable(PACKAGE)
    if settings.sink is not None:
        _HANDLER_IDS.append(
            _loguru.add(
                settings.sink,
                level=settings.level,
                format=_format_record,
                filter=PACKAGE,
                colorize=False,
                serialize=settings.json_logs,
            )
        )
    if settings.console:
        _HANDLER_IDS.append(
            _loguru.add(
                sys.stderr,
                level=settings.level,
                format=_format_record,
                filter=PACKAGE,
                colorize=settings.colorize,
                serialize=settings.json_logs,
            )
        )
    if settings.log_file:
        _HANDLER_IDS.append(
            _loguru.add(
                settings.log_file,
                level=settings.level,
                format=_format_record,
                filter=PACKAGE,
                colorize=False,
                serialize=settings.json_logs,
            )
        )


def get_logger(name: Optional[str] = None) -> Any:
    """Return a cached loguru logger bound to ``name`` as its component."""

    logger_name = name or DEFAULT_LOGGER_NAME
    if logger_name not in _LOGGER_CACHE:
        _LOGGER_CACHE[logger_name] = _loguru.bind(component=logger_name)
    return _LOGGER_CACHE[logger_name]


def record_event(
    name: str,
    *,
    level: str | Any = "info",
    data: Optional[Dict[str, Any]] = None,
    logger_name: Optional[str] = None,
) -> None:
    """Emit a structured event; ``data`` is bound to the record's extras."""

    log = get_logger(logger_name)
    payload = {"event": name, **(data or {})}
    log.bind(event=name, data=payload).log(
        _resolve_level(level), "event::{} {}", name, payload
    )


@dataclass
class SpanHandle:
    """Handle returned from ``span`` for optional metadata updates."""

    logger: Any
    span_name: str
    component_name: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    elapsed_ms: Optional[float] = None

    def add_metadata(self, key: str, value: Any) -> None:
        self.metadata[key] = _stringify(value)

    def _emit(
        self, level: str, message: str, extra: Optional[Dict[str, Any]] = None
    ) -> None:
        payload = {"span": self.span_name, **self.metadata}
        if self.component_name:
            payload["component"] = self.component_name
        if extra:
            payload.update({key: _stringify(val) for key, val in extra.items()})
        self.logger.log(_resolve_level(level), "{} {}", message, payload)

    def fail(self, reason: str) -> None:
        self._emit("error", "span::fail", {"reason": reason})

    def cancel(self, reason: str | None = None) -> None:
        extra = {"reason": reason} if reason else None
        self._emit("warning", "span::cancel", extra)


@contextmanager
def span(
    name: str,
    *,
    logger_name: Optional[str] = None,
    component: Optional[str | bool] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Iterator[SpanHandle]:
    """Time a code block and (optionally) tag it with a component name.

    Parameters
    ----------
    name:
        Operation name, bound as ``span`` on every record inside the block.
    logger_name:
        Target logger; defaults to the engine logger.
    component:
        If ``True`` use the same name as the span; if a string, use it as the
        component identifier.
    metadata:
        Optional metadata bound into the logging context for the block and
        reported with the closing ``span::end`` record.
    """

    log = get_logger(logger_name)
    component_name = None
    if component is True:
        component_name = name
    elif isinstance(component, str):
        component_name = component

    metadata_payload = {
        key: _stringify(value) for key, value in (metadata or {}).items()
    }
    handle = SpanHandle(
        logger=log,
        span_name=name,
        component_name=component_name,
        metadata=dict(metadata_payload),
    )
    started = time.perf_counter()
    with _loguru.contextualize(span=name, **metadata_payload):
        try:
            yield handle
        except Exception as exc:
            handle.fail(str(exc))
            raise
        finally:
            handle.elapsed_ms = (time.perf_counter() - started) * 1000.0
            handle._emit("debug", "span::end", {"elapsed_ms": f"{handle.elapsed_ms:.3f}"})


# Initialize the module-level logger once the config is ready.
configure()
logger = get_logger()

__all__ = [
    "SpanHandle",
    "configure",
    "get_logger",
    "record_event",
    "span",
    "logger",
]
