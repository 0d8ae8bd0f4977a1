"""
Async WebSocket load test for live vote counts.

Opens many subscribers on one poll's counts socket, keeps them alive with
pings and measures how long each takes to see its initial snapshot and how
many live updates arrive. Vote from Locust (or anything else) while this runs
to generate updates.

Run separately from Locust tests:
    python websocket_load_async.py http://localhost:8000 1 500 60
"""

import asyncio
import json
import sys
import time
from collections import Counter

import websockets

PING_INTERVAL = 15.0


class CountsSubscriberLoadTest:
    """Holds N subscribers open on a poll's counts socket."""

    def __init__(self, host: str, poll_id: int, subscribers: int = 500):
        self.url = (
            host.replace("http://", "ws://").replace("https://", "wss://").rstrip("/")
            + f"/ws/polls/{poll_id}/counts/"
        )
        self.poll_id = poll_id
        self.subscribers = subscribers
        self.snapshot_latencies = []
        self.updates = 0
        self.pongs = 0
        self.rejected = 0
        self.errors = Counter()
        self.last_total = 0
        self.count_regressions = 0

    def _track_counts(self, data):
        if data is None:
            return
        total = data.get("total_votes", 0)
        if total < self.last_total:
            self.count_regressions += 1
        self.last_total = max(self.last_total, total)

    async def subscriber(self, duration: int):
        started = time.monotonic()
        try:
            async with websockets.connect(self.url, open_timeout=10) as ws:
                snapshot = json.loads(await asyncio.wait_for(ws.recv(), timeout=5.0))
                if snapshot.get("type") != "vote_counts":
                    self.errors[f"unexpected first message {snapshot.get('type')}"] += 1
                    return
                self.snapshot_latencies.append((time.monotonic() - started) * 1000)
                self._track_counts(snapshot.get("data"))

                deadline = time.monotonic() + duration
                next_ping = time.monotonic() + PING_INTERVAL
                while time.monotonic() < deadline:
                    if time.monotonic() >= next_ping:
                        await ws.send(json.dumps({"type": "ping"}))
                        next_ping += PING_INTERVAL
                    try:
                        message = json.loads(await asyncio.wait_for(ws.recv(), timeout=1.0))
                    except asyncio.TimeoutError:
                        continue

                    if message["type"] == "vote_counts_update":
                        self.updates += 1
                        self._track_counts(message.get("data"))
                    elif message["type"] == "pong":
                        self.pongs += 1
                    else:
                        self.errors[message.get("message", message["type"])] += 1
        except websockets.exceptions.InvalidStatus:
            self.rejected += 1
        except websockets.exceptions.ConnectionClosedError as e:
            # 4004 = poll does not exist
            if e.rcvd is not None and e.rcvd.code == 4004:
                self.rejected += 1
            else:
                self.errors[str(e)] += 1
        except (OSError, asyncio.TimeoutError) as e:
            self.errors[type(e).__name__] += 1

    async def run(self, duration: int = 60):
        print(f"Subscribing {self.subscribers} clients to {self.url} for {duration}s")
        print("=" * 80)
        await asyncio.gather(*(self.subscriber(duration) for _ in range(self.subscribers)))
        self.print_statistics()

    def print_statistics(self):
        connected = len(self.snapshot_latencies)
        print("\n" + "=" * 80)
        print("VOTE COUNTS WEBSOCKET RESULTS")
        print("=" * 80)
        print(f"Subscribers: {connected}/{self.subscribers} received a snapshot")
        print(f"Rejected (unknown poll): {self.rejected}")
        print(f"Live updates received: {self.updates}")
        print(f"Pongs received: {self.pongs}")
        print(f"Final total_votes seen: {self.last_total}")
        if self.count_regressions:
            print(f"WARNING: counts went backwards {self.count_regressions} times")

        if self.snapshot_latencies:
            latencies = sorted(self.snapshot_latencies)
            print("\nSnapshot latency:")
            print(f"  Average: {sum(latencies) / len(latencies):.2f}ms")
            print(f"  p95: {latencies[int(len(latencies) * 0.95) - 1]:.2f}ms")
            print(f"  Max: {latencies[-1]:.2f}ms")

        if self.errors:
            print(f"\nErrors: {sum(self.errors.values())}")
            for error, count in self.errors.most_common():
                print(f"  {error}: {count}")


def main():
    if len(sys.argv) < 3:
        print("Usage: python websocket_load_async.py <host> <poll_id> [subscribers] [duration]")
        sys.exit(1)

    host = sys.argv[1]
    poll_id = int(sys.argv[2])
    subscribers = int(sys.argv[3]) if len(sys.argv) > 3 else 500
    duration = int(sys.argv[4]) if len(sys.argv) > 4 else 60

    asyncio.run(CountsSubscriberLoadTest(host, poll_id, subscribers).run(duration))


if __name__ == "__main__":
    main()
