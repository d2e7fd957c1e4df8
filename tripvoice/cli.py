"""tripvoice CLI 入口：一句话记账 / 出行需求解析"""

from __future__ import annotations

import sys

from dotenv import load_dotenv

from tripvoice.application.expense_intake import parse_expense
from tripvoice.application.trip_intake import parse_trip_request
from tripvoice.domain.models import CATEGORY_LABELS, ExpenseDraft, TripRequestDraft

load_dotenv()  # 自动加载 .env 文件

_EXPENSE_PREFIXES = ("记账", "记一笔")
_FIELD_LABELS = {"destination": "目的地", "duration_days": "天数"}


def _split_expense(user_input: str) -> tuple[bool, str]:
    """识别记账指令，返回 (是否记账, 去掉前缀后的文本)"""
    text = user_input.strip()
    if text.startswith("--expense"):
        return True, text[len("--expense"):].strip()
    for prefix in _EXPENSE_PREFIXES:
        if text.startswith(prefix):
            return True, text[len(prefix):].lstrip(" ：:")
    return False, text


def format_expense(draft: ExpenseDraft | None) -> str:
    if draft is None:
        return "❌ 未能识别金额，请手动输入"
    lines = [
        f"💰 金额：¥{draft.amount}",
        f"🏷️  类别：{CATEGORY_LABELS[draft.category]}",
    ]
    if draft.description:
        lines.append(f"📝 描述：{draft.description}")
    lines.append(f"   (来源: {draft.source.value})")
    return "\n".join(lines)


def format_trip(draft: TripRequestDraft) -> str:
    lines = [
        f"🗺️  目的地：{draft.destination or '未识别'}",
        f"📅 天数：{draft.duration_days or '未识别'}",
    ]
    if draft.budget_amount is not None:
        lines.append(f"💰 预算：¥{draft.budget_amount}")
    if draft.traveler_count:
        lines.append(f"👥 人数：{draft.traveler_count}")
    if draft.travel_style:
        lines.append(f"🎒 风格：{draft.travel_style.value}")
    if draft.preferences:
        lines.append(f"❤️  偏好：{'、'.join(sorted(draft.preferences))}")
    if draft.special_requirements:
        lines.append(f"⚠️  特殊要求：{draft.special_requirements}")

    missing = draft.missing_fields()
    if missing:
        lines.append(f"\n🤖 还需要补充：{'、'.join(_FIELD_LABELS.get(f, f) for f in missing)}")
    lines.append(f"   (来源: {draft.source.value})")
    return "\n".join(lines)


def handle(user_input: str) -> str:
    is_expense, text = _split_expense(user_input)
    if is_expense:
        return format_expense(parse_expense(text))
    return format_trip(parse_trip_request(text))


def main():
    """单参数模式直接解析一次；无参数进入交互模式。"""
    if len(sys.argv) > 1:
        print(handle(" ".join(sys.argv[1:])))
        return

    print("tripvoice")
    print("=" * 50)
    print("输入出行需求开始解析；以「记账」开头记录一笔费用；输入 quit 退出\n")

    while True:
        try:
            user_input = input("\n你: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\n再见！")
            break

        if not user_input:
            continue
        if user_input.lower() in ("quit", "exit", "q"):
            print("再见！")
            break

        print("\n" + handle(user_input))


if __name__ == "__main__":
    main()
