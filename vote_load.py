"""
vote_load.py - async load script that toggles votes and records views

Every simulated visitor records a visit, views a few subjects and toggles
its vote on some of them. At the end the script reads each subject's count
and today's dashboard and reports whether `upvotes` matches the counts.

Usage:
  python vote_load.py --base http://127.0.0.1:8000 --visitors 500 --concurrency 50
"""
import argparse
import asyncio
import random
import time
from datetime import datetime, timezone

import httpx


def _now_iso():
    return datetime.now(timezone.utc).isoformat()


async def _visitor(client: httpx.AsyncClient, base: str, subjects, idx: int):
    headers = {"X-Visitor-Id": f"load-{idx}"}
    ok = fail = 0
    try:
        r = await client.post(f"{base}/analytics/visit", timeout=10)
        r.raise_for_status()
        for subject in random.sample(subjects, k=min(3, len(subjects))):
            r = await client.post(f"{base}/analytics/views/{subject}", timeout=10)
            r.raise_for_status()
            if random.random() < 0.6:
                r = await client.post(f"{base}/votes/{subject}/toggle", headers=headers, timeout=10)
                if r.status_code == 200:
                    ok += 1
                else:
                    fail += 1
    except httpx.HTTPError:
        fail += 1
    return ok, fail


async def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--base", default="http://127.0.0.1:8000")
    parser.add_argument("--visitors", type=int, default=500)
    parser.add_argument("--concurrency", type=int, default=50)
    args = parser.parse_args()
    base = args.base.rstrip("/")

    start_iso = _now_iso()
    t0 = time.perf_counter()
    toggles_ok = toggles_fail = 0

    limit = httpx.Limits(max_connections=args.concurrency, max_keepalive_connections=args.concurrency)
    async with httpx.AsyncClient(limits=limit) as client:
        subjects = [s["key"] for s in (await client.get(f"{base}/subjects")).json()]
        sem = asyncio.Semaphore(args.concurrency)

        async def _task(i):
            nonlocal toggles_ok, toggles_fail
            async with sem:
                ok, fail = await _visitor(client, base, subjects, i)
                toggles_ok += ok
                toggles_fail += fail

        await asyncio.gather(*(_task(i) for i in range(args.visitors)))

        dt = time.perf_counter() - t0
        counts = {}
        for subject in subjects:
            counts[subject] = (await client.get(f"{base}/votes/{subject}")).json()["count"]
        today = datetime.now(timezone.utc).date().isoformat()
        board = (await client.get(f"{base}/dashboard/{today}")).json()["leaderboard"]

    upvotes = {row["subject"]: row["upvotes"] for row in board}
    drift = {s: (counts[s], upvotes.get(s, 0)) for s in subjects if counts[s] != upvotes.get(s, 0)}

    print(f"START: {start_iso}")
    print(f"END:   {_now_iso()}")
    print(f"TOTAL: {dt:.3f} s")
    print(f"OPS:   visitors={args.visitors}, toggles ok={toggles_ok}, fail={toggles_fail}")
    if dt > 0:
        print(f"TPS:   {toggles_ok/dt:.1f} toggles/s")
    # Concurrent visitors on one subject race on the count; drift here is that race
    print(f"DRIFT: {drift or 'none'}")


if __name__ == "__main__":
    asyncio.run(main())
