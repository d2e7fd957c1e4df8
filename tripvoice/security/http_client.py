"""外部 REST 调用的统一出口

超时与有限重试都在这里处理。抛出的 ToolError 消息先经过 KeyManager 脱敏，
URL 中的 key 参数不会出现在日志或接口响应里。
"""

from __future__ import annotations

import time
from typing import Any, Optional

import httpx

from tripvoice.security.key_manager import get_key_manager
from tripvoice.shared.exceptions import ToolError

BACKOFF_SECONDS = 0.5


class SecureHttpClient:
    def __init__(
        self,
        *,
        timeout: float = 10.0,
        max_retries: int = 0,
        tool_name: str = "http",
        transport: httpx.BaseTransport | None = None,
    ):
        self._timeout = timeout
        self._max_retries = max_retries
        self._tool_name = tool_name
        self._transport = transport

    def _fail(self, message: str) -> ToolError:
        return ToolError(self._tool_name, get_key_manager().scrub_text(message))

    def _fetch_once(
        self,
        url: str,
        params: Optional[dict[str, Any]],
        headers: Optional[dict[str, str]],
    ) -> dict[str, Any]:
        with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
            resp = client.get(url, params=params, headers=headers)
        if resp.is_error:
            raise self._fail(f"HTTP {resp.status_code}: {resp.request.url}")
        try:
            return resp.json()
        except ValueError as exc:
            raise self._fail(f"响应不是合法 JSON: {exc}") from None

    def get(
        self,
        url: str,
        *,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> dict[str, Any]:
        """GET 并解析 JSON；超时与网络错误按 max_retries 重试，HTTP 错误码与坏 JSON 同样计入重试。"""
        attempts = self._max_retries + 1
        error: ToolError | None = None
        for attempt in range(1, attempts + 1):
            try:
                return self._fetch_once(url, params, headers)
            except ToolError as exc:
                error = exc
            except httpx.TimeoutException:
                error = self._fail(f"请求超时（{self._timeout}s），第 {attempt} 次尝试")
            except httpx.HTTPError as exc:
                error = self._fail(f"网络请求失败: {exc}")

            if attempt < attempts:
                time.sleep(BACKOFF_SECONDS * attempt)

        raise error
