"""出行需求解析测试（正则降级 + LLM 结果的文本证据兜底）"""

from decimal import Decimal

from tripvoice.application import trip_intake
from tripvoice.domain.enums import DraftSource, TravelStyle
from tripvoice.parsing.trip_extractors import (
    apply_llm_result,
    build_draft,
    extract_budget,
    extract_days,
    extract_destination,
    extract_special_requirements,
    extract_traveler_count,
    infer_travel_style,
    parse_trip_locally,
)


def test_full_sentence_locally():
    draft = parse_trip_locally("我和女朋友想去上海玩2天，预算3000，喜欢美食")
    assert draft.destination == "上海"
    assert draft.duration_days == 2
    assert draft.budget_amount == Decimal("3000")
    assert draft.traveler_count == 2
    assert "美食" in draft.preferences
    assert draft.travel_style == TravelStyle.FOOD
    assert draft.source == DraftSource.HEURISTIC
    assert draft.missing_fields() == []


def test_per_day_budget_multiplied_by_days():
    draft = parse_trip_locally("一个人去成都3天，每天预算500")
    assert draft.budget_amount == Decimal("1500")
    assert draft.traveler_count == 1


def test_per_day_budget_without_days():
    draft = parse_trip_locally("去成都，每天500")
    assert draft.duration_days is None
    assert draft.budget_amount == Decimal("500")


def test_budget_units():
    assert extract_budget("预算1.5万") == (Decimal("15000.0"), False)
    assert extract_budget("总预算5k") == (Decimal("5000"), False)
    assert extract_budget("大概2000元") == (Decimal("2000"), False)
    assert extract_budget("随便玩玩") is None


def test_days_skip_calendar_dates():
    assert extract_days("10月1日去杭州") is None
    assert extract_days("玩5日") == 5
    assert extract_days("玩100天") is None


def test_destination_from_pattern():
    assert extract_destination("想去婺源玩") == "婺源"
    assert extract_destination("随便走走") is None


def test_traveler_count():
    assert extract_traveler_count("我们4个人") == 4
    assert extract_traveler_count("一家三口出游") == 3
    assert extract_traveler_count("随便") is None


def test_travel_style_priority():
    assert infer_travel_style("出差顺便吃美食") == TravelStyle.BUSINESS
    assert infer_travel_style("想去徒步") == TravelStyle.ADVENTURE
    assert infer_travel_style("去看看") == TravelStyle.SIGHTSEEING


def test_special_requirements():
    special = extract_special_requirements("我不吃辣，只去免费景点，必去西湖、灵隐寺")
    assert special == "不吃辣；只去免费景点；必去：西湖、灵隐寺"


def test_missing_fields():
    draft = parse_trip_locally("喜欢美食")
    assert draft.missing_fields() == ["destination", "duration_days"]


def test_apply_llm_result_ignores_invalid_values():
    fields: dict = {}
    apply_llm_result(
        {"destination": "北京", "duration": "abc", "budgetAmount": -1, "travelStyle": "party", "travelers": 0},
        fields,
    )
    draft = build_draft(fields, DraftSource.LLM)
    assert draft.destination == "北京"
    assert draft.duration_days is None
    assert draft.budget_amount is None
    assert draft.travel_style is None
    assert draft.traveler_count is None


def test_llm_result_used_with_text_evidence(monkeypatch):
    monkeypatch.setattr(
        trip_intake,
        "_llm_extract",
        lambda text, api_key=None: {
            "destination": "北京",
            "duration": 5,
            "budgetAmount": 8000,
            "travelStyle": "cultural",
            "preferences": ["历史"],
        },
    )
    draft = trip_intake.parse_trip_request("去上海玩2天")
    assert draft.source == DraftSource.LLM
    # 文本里明确说的城市/天数优先
    assert draft.destination == "上海"
    assert draft.duration_days == 2
    assert draft.budget_amount == Decimal("8000")
    assert draft.travel_style == TravelStyle.CULTURAL
    assert "历史" in draft.preferences


def test_llm_without_style_infers_from_text(monkeypatch):
    monkeypatch.setattr(trip_intake, "_llm_extract", lambda text, api_key=None: {"destination": "厦门"})
    draft = trip_intake.parse_trip_request("去厦门度假")
    assert draft.travel_style == TravelStyle.RELAXATION


def test_llm_unavailable_falls_back_to_regex(monkeypatch):
    monkeypatch.setattr(trip_intake, "_llm_extract", lambda text, api_key=None: None)
    draft = trip_intake.parse_trip_request("去杭州玩3天")
    assert draft.source == DraftSource.HEURISTIC
    assert draft.destination == "杭州"
    assert draft.duration_days == 3


def test_llm_disabled_by_flag(monkeypatch):
    def _boom(text, api_key=None):
        raise AssertionError("LLM should not be called")

    monkeypatch.setenv("TRIP_LLM_ENABLED", "0")
    monkeypatch.setattr(trip_intake, "_llm_extract", _boom)
    assert trip_intake.parse_trip_request("去杭州玩3天").source == DraftSource.HEURISTIC


def test_llm_exception_returns_none(monkeypatch):
    class _BrokenLLM:
        def invoke(self, prompt):
            raise TimeoutError("slow")

    monkeypatch.setattr("tripvoice.infrastructure.llm_factory.get_llm", lambda api_key=None: _BrokenLLM())
    assert trip_intake._llm_extract("去杭州玩3天") is None


def test_empty_text():
    draft = trip_intake.parse_trip_request("")
    assert draft.destination is None
    assert draft.preferences == set()


def test_per_day_budget_in_text_overrides_llm_total(monkeypatch):
    monkeypatch.setattr(
        trip_intake,
        "_llm_extract",
        lambda text, api_key=None: {"destination": "成都", "duration": 3, "budgetAmount": 500},
    )
    draft = trip_intake.parse_trip_request("去成都玩3天，每天500元")
    assert draft.source == DraftSource.LLM
    assert draft.budget_amount == Decimal("1500")


def test_infinite_llm_numbers_are_ignored(monkeypatch):
    monkeypatch.setattr(
        trip_intake,
        "_llm_extract",
        lambda text, api_key=None: {"destination": "成都", "duration": float("inf"), "travelers": float("inf")},
    )
    draft = trip_intake.parse_trip_request("去成都玩3天")
    assert draft.duration_days == 3
    assert draft.traveler_count is None


def test_unusable_llm_result_falls_back_to_regex(monkeypatch):
    def _explode(result, fields):
        raise OverflowError("cannot convert float infinity to integer")

    monkeypatch.setattr(trip_intake, "_llm_extract", lambda text, api_key=None: {"destination": "成都"})
    monkeypatch.setattr(trip_intake, "apply_llm_result", _explode)
    draft = trip_intake.parse_trip_request("去成都玩3天")
    assert draft.source == DraftSource.HEURISTIC
    assert draft.destination == "成都"
    assert draft.duration_days == 3
