"""Structured logging: console output plus a JSON-lines event log."""

import contextvars
import json
import logging
import threading
import uuid
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, TextIO

from wander_search.core.config import config

_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)


def new_request_id() -> str:
    rid = uuid.uuid4().hex[:12]
    _request_id.set(rid)
    return rid


def current_request_id() -> str | None:
    return _request_id.get()


def _render(message: str, args: tuple) -> str:
    if not args:
        return message
    try:
        return message % args
    except (TypeError, ValueError):
        return f"{message} {args!r}"


def _short(text: str | None, max_len: int = 80) -> str:
    if not text or not text.strip():
        return ""
    s = text.strip().replace("\n", " ")
    return s[:max_len] + "..." if len(s) > max_len else s


@dataclass
class LogEvent:
    event_type: str
    timestamp: str
    data: dict[str, Any]

    def to_dict(self) -> dict:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)


class SearchLogger:
    def __init__(self, log_to_file: bool | None = None):
        self.log_to_file = config.log_to_file if log_to_file is None else log_to_file
        self.log_file = config.logs_dir / "search.log"
        self._file_lock = threading.Lock()
        self._log_file_handle: TextIO | None = None
        self._setup_console_logger()

    def _setup_console_logger(self):
        self.console = logging.getLogger("wander_search")
        self.console.setLevel(logging.DEBUG)
        if not self.console.handlers:
            handler = logging.StreamHandler()
            handler.setLevel(getattr(logging, config.log_level, logging.INFO))
            handler.setFormatter(
                logging.Formatter(
                    "%(asctime)s │ %(levelname)-7s │ %(name)s │ %(message)s",
                    datefmt="%H:%M:%S",
                )
            )
            self.console.addHandler(handler)

    def _file(self) -> TextIO:
        if self._log_file_handle is None:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
            self._log_file_handle = open(self.log_file, "a", encoding="utf-8")
        return self._log_file_handle

    def log_event(self, event: LogEvent) -> None:
        if not self.log_to_file:
            return
        with self._file_lock:
            handle = self._file()
            handle.write(event.to_json() + "\n")
            handle.flush()

    def close(self) -> None:
        with self._file_lock:
            if self._log_file_handle is not None:
                self._log_file_handle.close()
                self._log_file_handle = None

    def _event(self, event_type: str, **data: Any) -> None:
        data["request_id"] = current_request_id()
        self.log_event(
            LogEvent(
                event_type=event_type,
                timestamp=datetime.now().isoformat(),
                data=data,
            )
        )

    def dispatch_start(self, category: str | None, query: str, has_origin: bool):
        self._event(
            "DISPATCH_START",
            category=category,
            query=query[:200],
            has_origin=has_origin,
        )
        self.console.debug(
            "[%s] search type=%s query=%r origin=%s",
            current_request_id(),
            category,
            _short(query, 60),
            has_origin,
        )

    def dispatch_done(
        self,
        category: str,
        raw_count: int,
        returned: int,
        dropped: int,
        duration_ms: float,
    ):
        self._event(
            "DISPATCH_DONE",
            category=category,
            raw_count=raw_count,
            returned=returned,
            dropped=dropped,
            duration_ms=duration_ms,
        )
        self.console.info(
            "[%s] %s: %s raw -> %s returned (%s dropped) in %.1fms",
            current_request_id(),
            category,
            raw_count,
            returned,
            dropped,
            duration_ms,
        )

    def dispatch_failed(
        self,
        kind: str,
        reason: str,
        *,
        field: str | None = None,
        retryable: bool = False,
        duration_ms: float | None = None,
    ):
        self._event(
            "DISPATCH_FAILED",
            kind=kind,
            field=field,
            reason=reason[:500],
            retryable=retryable,
            duration_ms=duration_ms,
        )
        level = logging.INFO if kind == "validation" else logging.WARNING
        label = f"{kind}[{field}]" if field else kind
        self.console.log(
            level,
            "[%s] search failed: %s %s%s",
            current_request_id(),
            label,
            _short(reason),
            " (retryable)" if retryable else "",
        )

    def result_dropped(self, category: str, result_id: str | None, reason: str):
        self._event(
            "RESULT_DROPPED", category=category, result_id=result_id, reason=reason
        )
        self.console.warning(
            "[%s] %s provider contract violation, dropped result %r: %s",
            current_request_id(),
            category,
            result_id,
            reason,
        )

    def error(self, message: str, *args, exception: Exception | None = None):
        self._event(
            "ERROR",
            message=_render(message, args),
            exception=str(exception) if exception else None,
        )
        self.console.error(message, *args, exc_info=exception)

    def warning(self, message: str, *args):
        self._event("WARNING", message=_render(message, args)[:500])
        self.console.warning(message, *args)

    def info(self, message: str, *args):
        self.console.info(message, *args)

    def debug(self, message: str, *args):
        self.console.debug(message, *args)


logger = SearchLogger()
