"""LLM 工厂：根据环境变量决定是否启用 LLM

支持的环境变量（按优先级）：
  DASHSCOPE_API_KEY  → 阿里云百炼（DashScope OpenAI 兼容端点）
  OPENAI_API_KEY     → OpenAI 原生
  LLM_API_KEY        → 自定义兼容端点（需配合 LLM_BASE_URL）

可选：
  LLM_MODEL            模型名，默认按供应商自动选择
  LLM_BASE_URL         自定义 base_url
  LLM_TIMEOUT_SECONDS  单次调用超时，默认 20 秒
"""

from __future__ import annotations

import os
from typing import NamedTuple, Optional

from langchain_openai import ChatOpenAI

_DASHSCOPE_BASE_URL = "https://dashscope.aliyuncs.com/compatible-mode/v1"
_DASHSCOPE_DEFAULT_MODEL = "qwen-plus"
_OPENAI_BASE_URL = "https://api.openai.com/v1"
_OPENAI_DEFAULT_MODEL = "gpt-4o-mini"


class LLMConfig(NamedTuple):
    provider: str
    api_key: str
    base_url: str
    model: str


def resolve_config(api_key: str | None = None) -> LLMConfig | None:
    """
    返回 LLMConfig 或 None。
    显式传入的 api_key（用户设置里的 Key）优先于环境变量。
    """
    if api_key:
        # OpenAI 原生 Key 形如 sk-...（51 位），其余按百炼处理
        if api_key.startswith("sk-") and len(api_key) == 51:
            return LLMConfig(
                "openai",
                api_key,
                os.getenv("LLM_BASE_URL", _OPENAI_BASE_URL),
                os.getenv("LLM_MODEL", _OPENAI_DEFAULT_MODEL),
            )
        return LLMConfig(
            "dashscope",
            api_key,
            os.getenv("LLM_BASE_URL", _DASHSCOPE_BASE_URL),
            os.getenv("LLM_MODEL", _DASHSCOPE_DEFAULT_MODEL),
        )

    ds_key = os.getenv("DASHSCOPE_API_KEY")
    if ds_key:
        return LLMConfig(
            "dashscope",
            ds_key,
            os.getenv("LLM_BASE_URL", _DASHSCOPE_BASE_URL),
            os.getenv("LLM_MODEL", _DASHSCOPE_DEFAULT_MODEL),
        )

    oai_key = os.getenv("OPENAI_API_KEY")
    if oai_key:
        return LLMConfig(
            "openai",
            oai_key,
            os.getenv("LLM_BASE_URL", _OPENAI_BASE_URL),
            os.getenv("LLM_MODEL", _OPENAI_DEFAULT_MODEL),
        )

    llm_key = os.getenv("LLM_API_KEY")
    if llm_key:
        return LLMConfig(
            "llm_compatible",
            llm_key,
            os.getenv("LLM_BASE_URL", _OPENAI_BASE_URL),
            os.getenv("LLM_MODEL", _OPENAI_DEFAULT_MODEL),
        )

    return None


def _timeout() -> float:
    return float(os.getenv("LLM_TIMEOUT_SECONDS", "20"))


def build_llm(config: LLMConfig) -> ChatOpenAI:
    # 不做重试：失败后由调用方降级到本地解析
    return ChatOpenAI(
        model=config.model,
        temperature=0,
        api_key=config.api_key,
        base_url=config.base_url,
        timeout=_timeout(),
        max_retries=0,
    )


# 模块级单例缓存
_llm_instance: Optional[ChatOpenAI] = None
_llm_resolved: bool = False  # 区分 None（无 key）和未初始化


def get_llm(api_key: str | None = None) -> Optional[ChatOpenAI]:
    """
    返回 LLM 实例。无 key 则返回 None（纯本地解析模式）。
    环境变量配置的实例是单例；显式传入 api_key 时每次新建。
    """
    global _llm_instance, _llm_resolved
    if api_key:
        return build_llm(resolve_config(api_key))

    if _llm_resolved:
        return _llm_instance

    cfg = resolve_config()
    _llm_instance = build_llm(cfg) if cfg is not None else None
    _llm_resolved = True
    return _llm_instance


def reset_llm() -> None:
    """重置 LLM 单例（测试用）"""
    global _llm_instance, _llm_resolved
    _llm_instance = None
    _llm_resolved = False


def is_llm_available() -> bool:
    """检查是否有可用的 LLM 配置（不创建实例）"""
    return resolve_config() is not None
