import json
from datetime import datetime, timedelta
from io import StringIO

from rich.console import Console

from hostpreferred.models import HostEntry, OptimizationReport, OptimizationTarget
from hostpreferred.output import JSONOutput, RichConsoleOutput


def make_report():
    started = datetime(2024, 1, 1, 12, 0, 0)
    return OptimizationReport(
        target=OptimizationTarget.CLOUDFLARE,
        started_at=started,
        completed_at=started + timedelta(seconds=3),
        entries=[
            HostEntry("cloudflare.com", "104.16.132.229", 30.0, is_core=True),
            HostEntry("workers.dev", "104.18.2.3", 10.0),
        ],
        resolution={"cloudflare.com": ["104.16.132.229", "104.16.133.229"]},
        missing_optional=["pages.dev"],
        timed_out=True,
    )


def test_json_output():
    data = json.loads(JSONOutput.format(make_report()))
    assert data["metadata"]["target"] == "Cloudflare"
    assert data["metadata"]["duration_seconds"] == 3.0
    assert data["metadata"]["timed_out"] is True
    assert data["entries"][0] == {
        "domain": "cloudflare.com",
        "ip": "104.16.132.229",
        "latency_ms": 30.0,
        "core": True,
    }
    assert data["latency_ms"]["min"] == 10.0
    assert data["missing_optional"] == ["pages.dev"]


def test_rich_output_mentions_entries_and_summary():
    buffer = StringIO()
    RichConsoleOutput.print(make_report(), console=Console(file=buffer, width=120))
    text = buffer.getvalue()
    assert "104.18.2.3" in text
    assert "Fastest:" in text and "workers.dev" in text
    assert "pages.dev" in text
    assert "Cloudflare hosts optimization succeeded: updated 2 records." in text
