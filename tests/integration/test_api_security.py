"""中间件测试：频率限制"""

from fastapi import FastAPI
from fastapi.testclient import TestClient

from tripvoice.api.main import RateLimitMiddleware


def _app(max_requests: int) -> FastAPI:
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, max_requests=max_requests, window_seconds=60)

    @app.post("/echo")
    def echo():
        return {"ok": True}

    @app.get("/echo")
    def echo_get():
        return {"ok": True}

    return app


def test_post_rate_limited():
    client = TestClient(_app(2))
    assert client.post("/echo").status_code == 200
    assert client.post("/echo").status_code == 200
    r = client.post("/echo")
    assert r.status_code == 429
    assert "频繁" in r.json()["detail"]


def test_get_not_rate_limited():
    client = TestClient(_app(1))
    for _ in range(3):
        assert client.get("/echo").status_code == 200
