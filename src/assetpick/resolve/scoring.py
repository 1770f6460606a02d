"""
Scoring & Recommendation Selector

Scores every installable artifact against a runtime context, ranks the
candidates and picks a single recommendation.

A score is the sum of a platform term, an architecture term, an optional libc
term and a container-format term. The platform and architecture terms each
resolve to an explicit outcome (exact, emulated, discounted or rejected); a
rejected term forces the whole score to zero. Rejected artifacts are kept in
the ranking with that zero score so callers can still show every artifact.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from assetpick.constants import (
    EXCLUDED_SUFFIXES,
    FORMAT_PREFERENCES,
    RECOMMENDATION_THRESHOLD,
    SCORE_ARCH_EMULATED,
    SCORE_ARCH_EXACT,
    SCORE_ARCH_UNIVERSAL,
    SCORE_ARCH_UNKNOWN,
    SCORE_LIBC_EXACT,
    SCORE_LIBC_INCOMPATIBLE,
    SCORE_LIBC_MUSL_ON_GLIBC,
    SCORE_LIBC_UNTAGGED_ON_GLIBC,
    SCORE_PLATFORM_EMULATED,
    SCORE_PLATFORM_EXACT,
    SCORE_PLATFORM_UNKNOWN,
    SCORE_REJECTED,
)
from assetpick.log_utils import logger

from .classifier import classify_arch, classify_libc, classify_platform
from .interfaces import Arch, Artifact, Libc, Platform, RuntimeContext, ScoredCandidate

# Rejected candidates stay in parse_assets() output with a zero score
KEEP_REJECTED = True

_EXCLUDE_RX = re.compile(
    r"\.(?:" + "|".join(EXCLUDED_SUFFIXES) + r")$",
    re.IGNORECASE,
)


class MatchOutcome(str, Enum):
    """How a single term of the score matched the runtime context."""

    EXACT = "exact"
    EMULATED = "emulated"
    DISCOUNTED = "discounted"
    REJECTED = "rejected"


@dataclass(frozen=True)
class TermResult:
    outcome: MatchOutcome
    points: int

    @property
    def rejected(self) -> bool:
        return self.outcome is MatchOutcome.REJECTED


@dataclass(frozen=True)
class ArtifactScore:
    """Score of one artifact name and whether it only runs through emulation."""

    score: int
    is_fallback: bool


_REJECTED = TermResult(MatchOutcome.REJECTED, SCORE_REJECTED)


def _runs_under_emulation(arch: Arch, context: RuntimeContext) -> bool:
    """Intel macOS builds run on Apple Silicon through Rosetta 2."""
    return (
        context.platform is Platform.MACOS
        and context.arch is Arch.ARM64
        and arch is Arch.X64
    )


def platform_term(platform: Platform, arch: Arch, context: RuntimeContext) -> TermResult:
    """
    Score how well an artifact's platform fits the runtime.

    The emulation case is checked before the exact match, otherwise an Intel
    macOS artifact would look like a native match on an Apple Silicon host.
    """
    if platform is Platform.MACOS and _runs_under_emulation(arch, context):
        return TermResult(MatchOutcome.EMULATED, SCORE_PLATFORM_EMULATED)
    if platform is not Platform.UNKNOWN and platform is context.platform:
        return TermResult(MatchOutcome.EXACT, SCORE_PLATFORM_EXACT)
    if platform is Platform.UNKNOWN:
        return TermResult(MatchOutcome.DISCOUNTED, SCORE_PLATFORM_UNKNOWN)
    return _REJECTED


def arch_term(arch: Arch, context: RuntimeContext) -> TermResult:
    """Score how well an artifact's architecture fits the runtime."""
    if arch is not Arch.UNKNOWN and arch is context.arch:
        return TermResult(MatchOutcome.EXACT, SCORE_ARCH_EXACT)
    if arch is Arch.UNIVERSAL:
        return TermResult(MatchOutcome.DISCOUNTED, SCORE_ARCH_UNIVERSAL)
    if arch is Arch.UNKNOWN:
        return TermResult(MatchOutcome.DISCOUNTED, SCORE_ARCH_UNKNOWN)
    # Counted on top of the platform emulation bonus
    if _runs_under_emulation(arch, context):
        return TermResult(MatchOutcome.EMULATED, SCORE_ARCH_EMULATED)
    return _REJECTED


def libc_points(libc: Libc, context: RuntimeContext) -> int:
    """
    Score libc compatibility; zero unless the host is Linux with a known libc.

    musl hosts cannot run glibc builds. glibc hosts prefer gnu builds but can
    usually run statically linked musl builds.
    """
    if context.platform is not Platform.LINUX:
        return 0
    if context.libc is Libc.MUSL:
        if libc is Libc.MUSL:
            return SCORE_LIBC_EXACT
        if libc is Libc.GLIBC:
            return SCORE_LIBC_INCOMPATIBLE
        return 0
    if context.libc is Libc.GLIBC:
        if libc is Libc.GLIBC:
            return SCORE_LIBC_EXACT
        if libc is Libc.MUSL:
            return SCORE_LIBC_MUSL_ON_GLIBC
        return SCORE_LIBC_UNTAGGED_ON_GLIBC
    return 0


def format_points(name: str) -> int:
    """Return the container-format preference bonus for a file name."""
    lower = (name or "").lower()
    for suffixes, points in FORMAT_PREFERENCES:
        if lower.endswith(suffixes):
            return points
    return 0


def is_excluded(name: str) -> bool:
    """Whether `name` is a checksum, signature or manifest side file."""
    return bool(_EXCLUDE_RX.search(name or ""))


def filter_installable(artifacts: Iterable[Artifact]) -> List[Artifact]:
    """Drop checksum/signature/manifest side files, preserving input order."""
    return [artifact for artifact in artifacts if not is_excluded(artifact.name)]


def score_artifact(name: str, context: RuntimeContext) -> ArtifactScore:
    """
    Compute the fitness score of a single artifact name for a runtime context.

    Parameters:
        name (str): Artifact file name.
        context (RuntimeContext): Resolved host platform/architecture.

    Returns:
        ArtifactScore: The integer score and whether the artifact is an emulation fallback.
        A rejected artifact scores 0 and is never a fallback.
    """
    return _score_classified(name, classify_platform(name), classify_arch(name), context)


def _score_classified(
    name: str, platform: Platform, arch: Arch, context: RuntimeContext
) -> ArtifactScore:
    platform_result = platform_term(platform, arch, context)
    if platform_result.rejected:
        return ArtifactScore(SCORE_REJECTED, False)

    arch_result = arch_term(arch, context)
    if arch_result.rejected:
        return ArtifactScore(SCORE_REJECTED, False)

    score = platform_result.points + arch_result.points
    score += libc_points(classify_libc(name), context)
    score += format_points(name)
    # An incompatible libc can push a weak candidate below zero
    score = max(score, SCORE_REJECTED)
    is_fallback = platform_result.outcome is MatchOutcome.EMULATED
    return ArtifactScore(score, is_fallback)


def parse_assets(
    artifacts: Sequence[Artifact], context: RuntimeContext
) -> List[ScoredCandidate]:
    """
    Filter, classify, score and rank artifacts for a runtime context.

    The sort is stable and strictly by descending score, so ties keep the order
    in which the artifacts were supplied.

    Returns:
        List[ScoredCandidate]: One candidate per installable artifact, best first.
    """
    candidates: List[ScoredCandidate] = []
    for artifact in filter_installable(artifacts):
        platform = classify_platform(artifact.name)
        arch = classify_arch(artifact.name)
        result = _score_classified(artifact.name, platform, arch, context)
        if result.score <= SCORE_REJECTED and not KEEP_REJECTED:
            continue
        candidates.append(
            ScoredCandidate(
                artifact=artifact,
                platform=platform,
                arch=arch,
                score=result.score,
                is_recommended=result.score >= RECOMMENDATION_THRESHOLD,
                is_fallback=result.is_fallback,
            )
        )

    candidates.sort(key=lambda candidate: candidate.score, reverse=True)
    logger.debug(
        "Ranked %d of %d artifacts for %s/%s",
        len(candidates),
        len(artifacts),
        context.platform.value,
        context.arch.value,
    )
    return candidates


def get_recommended_asset(
    artifacts: Sequence[Artifact], context: RuntimeContext
) -> Optional[Artifact]:
    """Return the highest-ranked artifact that clears the recommendation threshold, or None."""
    for candidate in parse_assets(artifacts, context):
        if candidate.is_recommended:
            return candidate.artifact
    return None


def best_match(
    artifacts: Sequence[Artifact], context: RuntimeContext
) -> Optional[ScoredCandidate]:
    """
    Return the top-ranked candidate with a positive score, ignoring the threshold.

    Useful to show the closest option when nothing is recommended. Returns None
    when every artifact was rejected or there are none.
    """
    ranked = parse_assets(artifacts, context)
    if ranked and ranked[0].score > SCORE_REJECTED:
        return ranked[0]
    return None


class AssetMatcher:
    """
    Binds a runtime context to the scoring operations.

    Usage:
        matcher = AssetMatcher(await resolve_runtime_context())
        ranked = matcher.parse_assets(artifacts)
        choice = matcher.get_recommended_asset(artifacts)
    """

    def __init__(self, context: RuntimeContext):
        self.context = context

    def score(self, name: str) -> ArtifactScore:
        return score_artifact(name, self.context)

    def parse_assets(self, artifacts: Sequence[Artifact]) -> List[ScoredCandidate]:
        return parse_assets(artifacts, self.context)

    def get_recommended_asset(self, artifacts: Sequence[Artifact]) -> Optional[Artifact]:
        return get_recommended_asset(artifacts, self.context)

    def best_match(self, artifacts: Sequence[Artifact]) -> Optional[ScoredCandidate]:
        return best_match(artifacts, self.context)
