"""Simple concurrency demo that posts the Paris demo to /match concurrently against the ASGI app.
This runs in-process and doesn't require the server to be started separately.
Run: python concurrency_demo.py
"""
import asyncio
import httpx
from main import app
from sample_data import demo_payload


async def run(n=10):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        tasks = [client.post("/match", json=demo_payload()) for _ in range(n)]
        res = await asyncio.gather(*tasks)
        for r in res:
            print(r.status_code, [(m["offer_id"], round(m["score"], 3)) for m in r.json()["matches"]])


if __name__ == "__main__":
    asyncio.run(run())
