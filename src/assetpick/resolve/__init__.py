"""
assetpick Resolution Engine

Given the artifacts attached to a release, decides which one fits the machine
running the resolution.

Core Components:
- interfaces: tag vocabulary and immutable records
- classifier: file-name to platform/architecture classification
- runtime: host platform/architecture detection, resolved once
- scoring: fitness scoring, ranking and recommendation
- github_source: GitHub Releases artifact supplier
- cache: on-disk cache for release listings
"""

from .cache import CacheManager
from .classifier import (
    arch_label,
    classify_arch,
    classify_libc,
    classify_platform,
    platform_label,
)
from .github_source import GithubArtifactSource
from .interfaces import (
    UNKNOWN_CONTEXT,
    Arch,
    Artifact,
    ArtifactSource,
    Libc,
    Platform,
    Release,
    RuntimeContext,
    ScoredCandidate,
)
from .runtime import (
    RuntimeContextProvider,
    reset_runtime_context,
    resolve_runtime_context,
)
from .scoring import (
    ArtifactScore,
    AssetMatcher,
    MatchOutcome,
    best_match,
    filter_installable,
    get_recommended_asset,
    parse_assets,
    score_artifact,
)

__all__ = [
    # Vocabulary
    "Platform",
    "Arch",
    "Libc",
    "Artifact",
    "Release",
    "RuntimeContext",
    "ScoredCandidate",
    "UNKNOWN_CONTEXT",
    # Classification
    "classify_platform",
    "classify_arch",
    "classify_libc",
    "platform_label",
    "arch_label",
    # Runtime context
    "RuntimeContextProvider",
    "resolve_runtime_context",
    "reset_runtime_context",
    # Scoring
    "ArtifactScore",
    "AssetMatcher",
    "MatchOutcome",
    "filter_installable",
    "score_artifact",
    "parse_assets",
    "get_recommended_asset",
    "best_match",
    # Suppliers
    "ArtifactSource",
    "GithubArtifactSource",
    "CacheManager",
]
