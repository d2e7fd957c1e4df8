"""高德 Web 服务请求签名

配置了 AMAP_SECRET 时，请求参数（含 key）按名称升序拼成 k1=v1&k2=v2，
末尾接上 Secret 后取 MD5 作为 sig。未配置 Secret 时只注入 key。
"""

from __future__ import annotations

import hashlib

from tripvoice.security.key_manager import get_key_manager


def compute_amap_sig(params: dict[str, str], secret: str) -> str:
    query = "&".join(f"{name}={params[name]}" for name in sorted(params))
    return hashlib.md5(f"{query}{secret}".encode("utf-8")).hexdigest()


def sign_amap_params(params: dict[str, str]) -> dict[str, str]:
    km = get_key_manager()
    signed = {**params, "key": km.get_amap_key(required=True)}
    secret = km.get_amap_secret()
    if secret:
        signed["sig"] = compute_amap_sig(signed, secret)
    return signed


def is_signing_enabled() -> bool:
    return bool(get_key_manager().get_amap_secret())
