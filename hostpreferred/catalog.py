"""
Domain catalog for hosts optimization.

Maps every optimization target to its core and optional domains and to
the marker lines delimiting its block in the hosts file.
"""

from .models import DomainList, OptimizationTarget, TargetProfile


GITHUB_DOMAINS = DomainList(
    core=(
        "github.com",
        "github.githubassets.com",
        "raw.githubusercontent.com",
        "avatars.githubusercontent.com",
    ),
    optional=(
        "avatars0.githubusercontent.com",
        "avatars1.githubusercontent.com",
        "avatars2.githubusercontent.com",
        "avatars3.githubusercontent.com",
        "avatars4.githubusercontent.com",
        "avatars5.githubusercontent.com",
        "camo.githubusercontent.com",
        "codeload.github.com",
        "desktop.githubusercontent.com",
        "gist.github.com",
        "github.io",
        "api.github.com",
        "live.github.com",
        "media.githubusercontent.com",
        "central.github.com",
        "cloud.githubusercontent.com",
        "user-images.githubusercontent.com",
        "objects.githubusercontent.com",
        "ghcr.io",
        "github.global.ssl.fastly.net",
    ),
)

CLOUDFLARE_DOMAINS = DomainList(
    core=(
        "dash.cloudflare.com",
        "cloudflare.com",
        "one.one.one.one",
    ),
    optional=(
        "api.cloudflare.com",
        "cdnjs.cloudflare.com",
        "images.cloudflare.com",
        "workers.dev",
        "pages.dev",
    ),
)

NEXUSMODS_DOMAINS = DomainList(
    core=(
        "www.nexusmods.com",
        "staticdelivery.nexusmods.com",
    ),
    optional=(
        "cf-files.nexusmods.com",
        "staticstats.nexusmods.com",
        "users.nexusmods.com",
    ),
)


# Markers stay byte-compatible with blocks already present in users' hosts files.
# An end marker may be shared: it only closes a block opened by its own start marker.
PROFILES: dict[OptimizationTarget, TargetProfile] = {
    OptimizationTarget.GITHUB: TargetProfile(
        target=OptimizationTarget.GITHUB,
        domains=GITHUB_DOMAINS,
        start_marker="# == Github ==",
        end_marker="# =========",
    ),
    OptimizationTarget.CLOUDFLARE: TargetProfile(
        target=OptimizationTarget.CLOUDFLARE,
        domains=CLOUDFLARE_DOMAINS,
        start_marker="# == Cloudflare ==",
        end_marker="# ============",
    ),
    OptimizationTarget.NEXUSMODS: TargetProfile(
        target=OptimizationTarget.NEXUSMODS,
        domains=NEXUSMODS_DOMAINS,
        start_marker="# == Nexusmods ==",
        end_marker="# ============",
    ),
}


def get_profile(target: OptimizationTarget) -> TargetProfile:
    """Get the static profile of a target."""
    try:
        return PROFILES[target]
    except KeyError:
        raise ValueError(f"No catalog entry for target: {target}") from None


def get_domains(target: OptimizationTarget) -> DomainList:
    """Get the domain list of a target."""
    return get_profile(target).domains


def list_targets() -> list[str]:
    """List all available target names."""
    return [target.value for target in PROFILES]
