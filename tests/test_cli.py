from datetime import datetime

import pytest
from click.testing import CliRunner

import hostpreferred.cli as cli
from hostpreferred.errors import CoreDomainsFailedError
from hostpreferred.models import HostEntry, OptimizationReport, OptimizationTarget


@pytest.fixture
def runner():
    return CliRunner()


def make_report(target):
    now = datetime.now()
    return OptimizationReport(
        target=target,
        started_at=now,
        completed_at=now,
        entries=[HostEntry(domain="github.com", ip="140.82.112.3", latency_ms=12.5, is_core=True)],
    )


def test_list_targets(runner):
    result = runner.invoke(cli.main, ["list-targets"])
    assert result.exit_code == 0
    for name in ("GitHub", "Cloudflare", "NexusMods"):
        assert name in result.output


def test_list_resolvers_in_priority_order(runner):
    result = runner.invoke(cli.main, ["list-resolvers"])
    assert result.exit_code == 0
    assert result.output.index("doh.pub") < result.output.index("dns.google")


def test_hosts_dir(runner, hosts_file):
    result = runner.invoke(cli.main, ["hosts-dir", "--hosts-file", str(hosts_file)])
    assert result.exit_code == 0
    assert result.output.strip() == str(hosts_file.parent)


def test_backup_then_restore(runner, hosts_file):
    original = hosts_file.read_bytes()

    result = runner.invoke(cli.main, ["backup", "--hosts-file", str(hosts_file)])
    assert result.exit_code == 0
    assert "hosts.bak.hostpreferred" in result.output

    hosts_file.write_text("garbage\n")
    result = runner.invoke(cli.main, ["restore", "--hosts-file", str(hosts_file)])
    assert result.exit_code == 0
    assert hosts_file.read_bytes() == original


def test_restore_without_backup_fails(runner, hosts_file):
    result = runner.invoke(cli.main, ["restore", "--hosts-file", str(hosts_file)])
    assert result.exit_code == 1
    assert "does not exist" in result.output


def test_optimize_prints_summary(runner, hosts_file, monkeypatch):
    seen = {}

    async def fake_optimize(target, config, progress_callback=None):
        seen["target"] = target
        seen["config"] = config
        return make_report(target)

    monkeypatch.setattr(cli, "optimize_hosts_async", fake_optimize)
    result = runner.invoke(
        cli.main,
        ["optimize", "github", "--hosts-file", str(hosts_file), "--deadline", "5", "-q"],
    )

    assert result.exit_code == 0, result.output
    assert "GitHub hosts optimization succeeded: updated 1 records." in result.output
    assert seen["target"] is OptimizationTarget.GITHUB
    assert seen["config"].deadline == 5.0
    assert seen["config"].hosts_path == str(hosts_file)


def test_optimize_json_output(runner, hosts_file, monkeypatch):
    async def fake_optimize(target, config, progress_callback=None):
        return make_report(target)

    monkeypatch.setattr(cli, "optimize_hosts_async", fake_optimize)
    result = runner.invoke(cli.main, ["optimize", "GitHub", "--hosts-file", str(hosts_file), "--json"])

    assert result.exit_code == 0, result.output
    assert '"ip": "140.82.112.3"' in result.output


def test_optimize_failure_exits_nonzero(runner, hosts_file, monkeypatch):
    async def fake_optimize(target, config, progress_callback=None):
        raise CoreDomainsFailedError(["github.com"])

    monkeypatch.setattr(cli, "optimize_hosts_async", fake_optimize)
    result = runner.invoke(cli.main, ["optimize", "github", "--hosts-file", str(hosts_file), "-q"])

    assert result.exit_code == 1
    assert "github.com" in result.output


def test_optimize_rejects_unknown_target(runner):
    result = runner.invoke(cli.main, ["optimize", "gitlab"])
    assert result.exit_code == 2
    assert "Unknown target" in result.output


def test_optimize_exports_report_next_to_hosts(runner, hosts_file, monkeypatch):
    async def fake_optimize(target, config, progress_callback=None):
        return make_report(target)

    monkeypatch.setattr(cli, "optimize_hosts_async", fake_optimize)
    result = runner.invoke(
        cli.main,
        ["optimize", "github", "--hosts-file", str(hosts_file), "--export-report"],
    )

    exported = hosts_file.parent / "hostpreferred-github.json"
    assert result.exit_code == 0, result.output
    assert f"Report exported to {exported}" in result.output
    assert '"ip": "140.82.112.3"' in exported.read_text(encoding="utf-8")
