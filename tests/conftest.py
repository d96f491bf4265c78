import asyncio
from typing import Optional

import pytest

from hostpreferred.prober import LatencyProber


class FakeEngine:
    """Resolution engine returning canned answers, optionally after a delay."""

    def __init__(self, answers: dict[str, list[str]], delays: Optional[dict[str, float]] = None):
        self.answers = answers
        self.delays = delays or {}
        self.closed = False

    async def resolve(self, domain: str) -> list[str]:
        delay = self.delays.get(domain)
        if delay:
            await asyncio.sleep(delay)
        return list(self.answers.get(domain, []))

    async def close(self):
        self.closed = True


def make_ping(latencies: dict[str, Optional[float]]):
    """ping3.ping stand-in with a fixed latency (ms) per address; None = no reply."""

    def fake_ping(ip, timeout=None, unit="s", seq=0):
        return latencies.get(ip)

    return fake_ping


@pytest.fixture
def make_prober():
    probers = []

    def factory(latencies, **kwargs):
        prober = LatencyProber(ping_func=make_ping(latencies), **kwargs)
        probers.append(prober)
        return prober

    yield factory
    for prober in probers:
        prober.close()


@pytest.fixture
def hosts_file(tmp_path):
    path = tmp_path / "hosts"
    path.write_text("127.0.0.1 localhost\n::1 localhost\n", encoding="utf-8")
    return path


@pytest.fixture
def fake_engine():
    return FakeEngine
