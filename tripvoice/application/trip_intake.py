"""出行需求入口：从用户描述（表单补充语 / 语音转写）中抽取 TripRequestDraft

优先用 LLM 提取，LLM 不可用或失败时降级到正则；LLM 成功时再用文本证据兜底，
避免把“上海2天”改成其他城市/天数。
"""

from __future__ import annotations

from typing import Any

from tripvoice.config.settings import is_enabled
from tripvoice.domain.enums import DraftSource
from tripvoice.domain.models import TripRequestDraft
from tripvoice.infrastructure.logging import get_logger
from tripvoice.parsing.json_block import extract_json_block
from tripvoice.parsing.trip_extractors import (
    apply_llm_result,
    apply_text_evidence,
    build_draft,
    infer_travel_style,
    regex_extract,
)

_TRIP_PROMPT = """请从以下中文文本中提取旅行规划的关键信息：

文本："{text}"

请提取：
- destination：目的地城市或景点名称
- duration：旅行天数（整数）
- budgetAmount：总预算金额（数字，元）
- travelStyle：relaxation / adventure / cultural / food / shopping / nature / sightseeing / business 之一
- travelers：同行人数（整数；“我和女朋友”为 2，“一个人”为 1）
- preferences：个人偏好数组，如 ["美食", "打卡标志地点"]
- specialRequirements：特殊要求（字符串，可省略）

只返回 JSON，不存在的信息用 null 或空数组。

示例：
输入："我和女朋友想去上海玩2天，预算3000，喜欢美食"
输出：{{"destination": "上海", "duration": 2, "budgetAmount": 3000, "travelStyle": "food", "travelers": 2, "preferences": ["美食"]}}"""


def _use_llm_extract() -> bool:
    return is_enabled("TRIP_LLM_ENABLED", default=True)


def _llm_extract(text: str, api_key: str | None = None) -> dict[str, Any] | None:
    """
    尝试用 LLM 结构化提取。
    成功返回 dict，失败返回 None（降级到正则）。
    """
    from tripvoice.infrastructure.llm_factory import get_llm

    llm = get_llm(api_key)
    if llm is None:
        return None

    logger = get_logger()
    logger.step_start("trip_intake", extractor="llm")
    try:
        resp = llm.invoke(_TRIP_PROMPT.format(text=text))
        content = resp.content if hasattr(resp, "content") else str(resp)
        result = extract_json_block(str(content))
    except Exception as exc:
        logger.fallback("trip_intake", f"{type(exc).__name__}: {exc}", extractor="llm")
        return None
    logger.step_end("trip_intake", extractor="llm")
    return result


def parse_trip_request(text: str, *, api_key: str | None = None) -> TripRequestDraft:
    """一段描述 → TripRequestDraft（尽力而为，字段可能为空）。"""
    text = (text or "").strip()
    fields: dict[str, Any] = {}
    if not text:
        return build_draft(fields, DraftSource.HEURISTIC)

    llm_result = _llm_extract(text, api_key) if _use_llm_extract() else None

    if llm_result:
        try:
            apply_llm_result(llm_result, fields)
            apply_text_evidence(text, fields)
            if not fields.get("travel_style"):
                fields["travel_style"] = infer_travel_style(text)
            return build_draft(fields, DraftSource.LLM)
        except (TypeError, ValueError, ArithmeticError) as exc:
            # 结构合法但取值不可用（如 Infinity、超出范围），按失败处理
            get_logger().fallback("trip_intake", f"{type(exc).__name__}: {exc}", extractor="llm")
            fields = {}

    regex_extract(text, fields)
    return build_draft(fields, DraftSource.HEURISTIC)


__all__ = ["parse_trip_request"]
