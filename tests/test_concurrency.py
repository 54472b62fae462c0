import asyncio
import os
import sys
from datetime import datetime, timezone

import httpx
import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from main import app
from sample_data import demo_payload


@pytest.mark.asyncio
async def test_concurrent_match_calls_agree():
    payload = demo_payload(datetime(2026, 10, 18, 8, 0, tzinfo=timezone.utc))
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        tasks = [client.post("/match", json=payload) for _ in range(10)]
        res = await asyncio.gather(*tasks)
    assert all(r.status_code == 200 for r in res)
    bodies = [r.json() for r in res]
    # same input, same ranking and scores on every call
    assert all(b == bodies[0] for b in bodies)
    assert [m["offer_id"] for m in bodies[0]["matches"]] == ["DRIVER-1"]
