import asyncio

import ping3.errors
import pytest

from hostpreferred.prober import LatencyProber


def test_picks_lowest_mean_latency(make_prober):
    prober = make_prober({"10.0.0.1": 50.0, "10.0.0.2": 10.0, "10.0.0.3": None})
    best = asyncio.run(prober.best_candidate("github.com", ["10.0.0.1", "10.0.0.2", "10.0.0.3"]))
    assert best.domain == "github.com"
    assert best.ip == "10.0.0.2"
    assert best.latency_ms == pytest.approx(10.0)


def test_unreachable_domain_has_no_candidate(make_prober):
    prober = make_prober({"10.0.0.1": None, "10.0.0.2": None})
    assert asyncio.run(prober.best_candidate("github.com", ["10.0.0.1", "10.0.0.2"])) is None


def test_no_candidates(make_prober):
    prober = make_prober({})
    assert asyncio.run(prober.best_candidate("github.com", [])) is None


def test_ties_pick_one_of_the_tied_addresses(make_prober):
    prober = make_prober({"10.0.0.1": 20.0, "10.0.0.2": 20.0, "10.0.0.3": 30.0})
    best = asyncio.run(prober.best_candidate("github.com", ["10.0.0.1", "10.0.0.2", "10.0.0.3"]))
    assert best.ip in {"10.0.0.1", "10.0.0.2"}


def test_mean_over_replies_only():
    replies = {0: 10.0, 1: None, 2: 30.0}
    seqs = []

    def ping(ip, timeout=None, unit="s", seq=0):
        seqs.append(seq)
        assert unit == "ms"
        assert timeout == 1.0
        return replies[seq]

    prober = LatencyProber(count=3, timeout=1.0, ping_func=ping)
    try:
        result = asyncio.run(prober.probe("10.0.0.1"))
    finally:
        prober.close()

    assert sorted(seqs) == [0, 1, 2]
    assert result.sent == 3
    assert result.received == 2
    assert result.mean_rtt_ms == pytest.approx(20.0)
    assert result.loss_rate == pytest.approx(100 / 3)


@pytest.mark.parametrize(
    "outcome",
    [False, None, OSError("network unreachable"), ping3.errors.HostUnknown("10.0.0.1")],
    ids=["error-flag", "timeout", "os-error", "ping-error"],
)
def test_failed_probes_count_as_lost(outcome):
    def ping(ip, timeout=None, unit="s", seq=0):
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    prober = LatencyProber(ping_func=ping)
    try:
        result = asyncio.run(prober.probe("10.0.0.1"))
    finally:
        prober.close()

    assert result.sent == 3
    assert not result.is_reachable
    assert result.mean_rtt_ms is None
