"""集中式 API Key 管理器

LLM 与高德的 Key 都从这里读取。凡是经过这里的 Key 都会被记住，
日志和异常消息输出前用 scrub_text 把它们擦掉。用户在设置页保存的
Key 通过 register 登记，同样参与擦除。
"""

from __future__ import annotations

import os
from typing import Optional

from tripvoice.security.redact import redact_sensitive
from tripvoice.shared.exceptions import KeyMissingError

LLM_KEY_NAMES = ("DASHSCOPE_API_KEY", "OPENAI_API_KEY", "LLM_API_KEY")
AMAP_KEY_NAME = "AMAP_API_KEY"
AMAP_SECRET_NAME = "AMAP_SECRET"

_MARKER = "[{name}:***REDACTED***]"


def _from_env(name: str) -> str:
    return os.getenv(name, "").strip()


class KeyManager:
    def __init__(self):
        self._known: dict[str, str] = {}

    def get(self, name: str, *, required: bool = False) -> Optional[str]:
        if name not in self._known:
            self.reload(name)
        value = self._known.get(name)
        if value is None and required:
            raise KeyMissingError(name)
        return value

    def register(self, name: str, value: str | None) -> None:
        """登记运行时注入的 Key，仅用于脱敏，不写回环境变量。"""
        if value:
            self._known[name] = value

    def reload(self, name: str) -> None:
        """以环境变量为准刷新指定 Key；环境里已删除的 Key 同时被遗忘。"""
        value = _from_env(name)
        if value:
            self._known[name] = value
        else:
            self._known.pop(name, None)

    def has_key(self, name: str) -> bool:
        return name in self._known or bool(_from_env(name))

    # 具体服务

    def get_amap_key(self, *, required: bool = True) -> str:
        return self.get(AMAP_KEY_NAME, required=required) or ""

    def get_amap_secret(self) -> Optional[str]:
        return self.get(AMAP_SECRET_NAME)

    def get_llm_key(self) -> Optional[str]:
        """DashScope 优先，其次 OpenAI，最后通用 LLM_API_KEY。"""
        return next(filter(None, (self.get(name) for name in LLM_KEY_NAMES)), None)

    def scrub_text(self, text: str) -> str:
        result = "" if text is None else str(text)
        # 长 Key 先替换，避免被其前缀相同的短 Key 截断
        for name, value in sorted(self._known.items(), key=lambda kv: -len(kv[1])):
            result = result.replace(value, _MARKER.format(name=name))
        return redact_sensitive(result)


_manager: Optional[KeyManager] = None


def get_key_manager() -> KeyManager:
    global _manager
    if _manager is None:
        _manager = KeyManager()
    return _manager
