"""语音记账入口：先调远程 LLM 结构化抽取，失败时同步降级到本地启发式

两种抽取器实现同一个 ExpenseExtractor 协议：
  - LLMExpenseExtractor：调用 LLM，要求返回 JSON
  - HeuristicExpenseExtractor：正则提取金额 + 关键词打分分类

远程路径的任何异常（网络错误、超时、JSON 不合法、金额/类别不合法）都会被
捕获并记录为 fallback 日志，然后走本地解析；不做重试。
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Protocol

from tripvoice.config.settings import is_enabled
from tripvoice.domain.enums import DraftSource, ExpenseCategory
from tripvoice.domain.models import ExpenseDraft
from tripvoice.infrastructure.logging import get_logger
from tripvoice.parsing.expense_extractors import parse_expense_locally
from tripvoice.parsing.json_block import extract_json_block
from tripvoice.shared.exceptions import MalformedResponseError

_EXPENSE_PROMPT = (
    "你是旅行记账助手。请从用户的一句话中提取一笔费用，返回 JSON（只返回 JSON，无其他文字）。\n"
    "字段说明：\n"
    "- amount: 金额（正数，单位元）\n"
    "- category: 类别，只能是 TRANSPORT/ACCOMMODATION/FOOD/SIGHTSEEING/SHOPPING/OTHER 之一\n"
    "- description: 简短描述（字符串，可省略）\n"
    "如果句子里没有金额，返回 {{\"amount\": null}}。\n\n"
    "用户消息：{text}"
)


class ExpenseExtractor(Protocol):
    name: str

    def extract(self, text: str) -> ExpenseDraft | None: ...


class HeuristicExpenseExtractor:
    name = "heuristic"

    def extract(self, text: str) -> ExpenseDraft | None:
        return parse_expense_locally(text)


def _draft_from_llm(data: dict[str, Any]) -> ExpenseDraft | None:
    raw_amount = data.get("amount")
    if raw_amount is None:
        return None
    if isinstance(raw_amount, bool):
        raise MalformedResponseError(f"invalid amount from model: {raw_amount!r}")
    try:
        amount = Decimal(str(raw_amount))
    except InvalidOperation as exc:
        raise MalformedResponseError(f"invalid amount from model: {raw_amount!r}") from exc
    if not amount.is_finite() or amount <= 0:
        raise MalformedResponseError(f"non-positive amount from model: {raw_amount!r}")

    raw_category = str(data.get("category") or ExpenseCategory.OTHER.value).strip().upper()
    try:
        category = ExpenseCategory(raw_category)
    except ValueError as exc:
        raise MalformedResponseError(f"unknown category from model: {raw_category}") from exc

    description = str(data.get("description") or "").strip() or None
    return ExpenseDraft(amount=amount, category=category, description=description, source=DraftSource.LLM)


class LLMExpenseExtractor:
    """远程结构化抽取。异常直接抛出，由 FallbackExpenseParser 统一处理。"""

    name = "llm"

    def __init__(self, llm: Any):
        self._llm = llm

    def extract(self, text: str) -> ExpenseDraft | None:
        resp = self._llm.invoke(_EXPENSE_PROMPT.format(text=text))
        content = resp.content if hasattr(resp, "content") else str(resp)
        return _draft_from_llm(extract_json_block(str(content)))


def _use_llm_extract() -> bool:
    return is_enabled("EXPENSE_LLM_ENABLED", default=True)


class FallbackExpenseParser:
    """remote-first，失败一次即降级到本地。"""

    def __init__(
        self,
        remote: Optional[ExpenseExtractor] = None,
        local: Optional[ExpenseExtractor] = None,
    ):
        self._remote = remote
        self._local = local or HeuristicExpenseExtractor()

    def parse(self, text: str) -> ExpenseDraft | None:
        logger = get_logger()
        text = (text or "").strip()
        if not text:
            return None

        if self._remote is not None:
            logger.step_start("expense_intake", extractor=self._remote.name)
            try:
                draft = self._remote.extract(text)
            except Exception as exc:
                logger.fallback("expense_intake", f"{type(exc).__name__}: {exc}", extractor=self._remote.name)
            else:
                logger.step_end("expense_intake", extractor=self._remote.name, matched=draft is not None)
                if draft is not None:
                    return draft

        # 远程失败或远程认为没有金额：都再用本地规则试一次
        return self._local.extract(text)


def default_parser(api_key: str | None = None) -> FallbackExpenseParser:
    """按环境/用户 Key 组装解析器；没有 LLM 配置时只用本地解析。"""
    from tripvoice.infrastructure.llm_factory import get_llm

    remote = None
    if _use_llm_extract():
        llm = get_llm(api_key)
        if llm is not None:
            remote = LLMExpenseExtractor(llm)
    return FallbackExpenseParser(remote=remote)


def parse_expense(text: str, *, api_key: str | None = None) -> ExpenseDraft | None:
    """一句话 → ExpenseDraft；无法识别金额时返回 None，由调用方提示手动录入。"""
    return default_parser(api_key).parse(text)


__all__ = [
    "ExpenseExtractor",
    "FallbackExpenseParser",
    "HeuristicExpenseExtractor",
    "LLMExpenseExtractor",
    "default_parser",
    "parse_expense",
]
