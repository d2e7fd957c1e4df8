"""pytest 全局 fixtures：测试环境隔离"""

import pytest


@pytest.fixture(autouse=True)
def no_real_apis(monkeypatch, tmp_path):
    """默认禁用真实 API（LLM + 高德），数据库写到临时目录"""
    monkeypatch.delenv("DASHSCOPE_API_KEY", raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("LLM_API_KEY", raising=False)
    monkeypatch.delenv("LLM_BASE_URL", raising=False)
    monkeypatch.delenv("LLM_MODEL", raising=False)
    monkeypatch.delenv("AMAP_API_KEY", raising=False)
    monkeypatch.delenv("AMAP_SECRET", raising=False)
    monkeypatch.delenv("EXPENSE_LLM_ENABLED", raising=False)
    monkeypatch.delenv("TRIP_LLM_ENABLED", raising=False)
    monkeypatch.setenv("TRAVEL_PERSISTENCE_ENABLED", "true")
    monkeypatch.setenv("TRAVEL_PERSISTENCE_DB", str(tmp_path / "tripvoice.sqlite3"))

    # 重置单例与缓存，确保每个测试独立
    from tripvoice.infrastructure.cache import ALL_CACHES
    from tripvoice.infrastructure.llm_factory import reset_llm
    from tripvoice.security.key_manager import get_key_manager

    km = get_key_manager()
    for key_name in ("DASHSCOPE_API_KEY", "OPENAI_API_KEY", "LLM_API_KEY", "AMAP_API_KEY", "AMAP_SECRET"):
        km.reload(key_name)
    for cache in ALL_CACHES:
        cache.clear()

    reset_llm()
    yield
    reset_llm()
