import pytest

from hostpreferred.catalog import PROFILES, get_domains, get_profile, list_targets
from hostpreferred.models import OptimizationTarget


def test_every_target_has_a_profile():
    assert set(PROFILES) == set(OptimizationTarget)
    assert list_targets() == ["GitHub", "Cloudflare", "NexusMods"]


def test_start_markers_are_unique():
    markers = [(p.start_marker, p.end_marker) for p in PROFILES.values()]
    assert len({start for start, _ in markers}) == len(markers)
    assert len(set(markers)) == len(markers)


def test_core_and_optional_do_not_overlap():
    for target in OptimizationTarget:
        domains = get_domains(target)
        assert domains.core
        assert not set(domains.core) & set(domains.optional)


def test_all_domains_lists_core_first():
    domains = get_profile(OptimizationTarget.CLOUDFLARE).domains
    assert domains.all_domains[:3] == ["dash.cloudflare.com", "cloudflare.com", "one.one.one.one"]
    assert domains.all_domains[3:] == list(domains.optional)


@pytest.mark.parametrize("name", ["github", "GITHUB", " GitHub ", "nexusmods"])
def test_parse_target(name):
    assert OptimizationTarget.parse(name) in (OptimizationTarget.GITHUB, OptimizationTarget.NEXUSMODS)


def test_parse_unknown_target():
    with pytest.raises(ValueError, match="Unknown target"):
        OptimizationTarget.parse("gitlab")
