"""从 LLM 文本回复中抠出第一个 JSON 对象"""

from __future__ import annotations

import json
import re
from typing import Any

from tripvoice.shared.exceptions import MalformedResponseError

_JSON_BLOCK_RE = re.compile(r"\{.*\}", re.DOTALL)


def _strip_code_fence(content: str) -> str:
    # 可能被 ```json 包裹
    content = content.strip()
    if content.startswith("```"):
        lines = content.split("\n")
        content = "\n".join(lines[1:-1] if lines[-1].strip() == "```" else lines[1:])
    return content


def extract_json_block(content: str) -> dict[str, Any]:
    """返回回复中第一个 `{...}` 块解析出的 dict，失败抛 MalformedResponseError。"""
    text = _strip_code_fence(content or "")
    match = _JSON_BLOCK_RE.search(text)
    if not match:
        raise MalformedResponseError("no JSON object found in model response")
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise MalformedResponseError(f"invalid JSON in model response: {exc.msg}") from exc
    if not isinstance(data, dict):
        raise MalformedResponseError("model response JSON is not an object")
    return data


__all__ = ["extract_json_block"]
