"""结构化日志：每个事件一行 JSON，写出前统一脱敏

事件类型：step_start / step_end（带耗时）、tool_call、fallback（远程失败转本地）、
warning、error。所有字段序列化后再经过 KeyManager.scrub_text，
因此异常信息里混入的 Key 也不会落盘。
"""

from __future__ import annotations

import datetime as dt
import json
import sys
import time
import uuid
from typing import Any, Optional, TextIO

from tripvoice.security.key_manager import get_key_manager


def _new_trace_id() -> str:
    return uuid.uuid4().hex[:12]


class StructuredLogger:
    def __init__(self, trace_id: Optional[str] = None, output: Optional[TextIO] = None):
        self.trace_id = trace_id or _new_trace_id()
        self._output = output
        self._started: dict[str, float] = {}

    @property
    def stream(self) -> TextIO:
        # 未指定输出时每次取当前 sys.stderr（pytest 会替换它）
        return self._output or sys.stderr

    def log(self, event: str, component: str, **fields: Any) -> None:
        record = {
            "ts": dt.datetime.now(dt.timezone.utc).isoformat(timespec="milliseconds"),
            "trace_id": self.trace_id,
            "event": event,
            "component": component,
            **fields,
        }
        try:
            line = json.dumps(record, ensure_ascii=False, default=str)
        except (TypeError, ValueError) as exc:
            line = json.dumps(
                {"ts": record["ts"], "trace_id": self.trace_id, "event": "log_encode_error", "error": str(exc)}
            )
        self.stream.write(get_key_manager().scrub_text(line) + "\n")
        self.stream.flush()

    def step_start(self, component: str, **fields: Any) -> None:
        self._started[component] = time.perf_counter()
        self.log("step_start", component, **fields)

    def step_end(self, component: str, **fields: Any) -> None:
        started = self._started.pop(component, None)
        elapsed = round((time.perf_counter() - started) * 1000, 1) if started is not None else None
        self.log("step_end", component, duration_ms=elapsed, **fields)

    def tool_call(self, tool: str, **fields: Any) -> None:
        self.log("tool_call", tool, **fields)

    def fallback(self, component: str, reason: str, **fields: Any) -> None:
        self.log("fallback", component, reason=reason, **fields)

    def warning(self, component: str, message: str, **fields: Any) -> None:
        self.log("warning", component, message=message, **fields)

    def error(self, component: str, error: str, **fields: Any) -> None:
        self.log("error", component, error=error, **fields)


_logger: Optional[StructuredLogger] = None


def get_logger(trace_id: Optional[str] = None) -> StructuredLogger:
    """进程级 logger；传入新的 trace_id 时换一个实例。"""
    global _logger
    if _logger is None or (trace_id and trace_id != _logger.trace_id):
        _logger = StructuredLogger(trace_id=trace_id)
    return _logger


__all__ = ["StructuredLogger", "get_logger"]
