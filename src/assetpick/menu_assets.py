# src/assetpick/menu_assets.py

from typing import List, Optional

from pick import pick

from assetpick.log_utils import logger
from assetpick.resolve.classifier import arch_label, platform_label
from assetpick.resolve.interfaces import Artifact, ScoredCandidate
from assetpick.utils import format_size


def describe_candidate(candidate: ScoredCandidate) -> str:
    """
    Build the one-line description shown for a ranked candidate.

    Example: "app-linux-x64.tar.gz  [Linux x64]  2.00 MB  score 160  (recommended)"
    """
    labels = " ".join(
        label
        for label in (platform_label(candidate.platform), arch_label(candidate.arch))
        if label
    )
    parts = [candidate.artifact.name]
    if labels:
        parts.append(f"[{labels}]")
    parts.append(format_size(candidate.artifact.size))
    parts.append(f"score {candidate.score}")
    if candidate.is_recommended:
        parts.append("(recommended)")
    elif candidate.is_fallback:
        parts.append("(emulated)")
    elif candidate.score == 0:
        parts.append("(incompatible)")
    return "  ".join(parts)


def select_artifact(candidates: List[ScoredCandidate]) -> Optional[Artifact]:
    """
    Present an interactive single-select prompt over ranked candidates.

    The list keeps the ranking order, so the recommended artifact (if any) is
    highlighted first.

    Returns:
        Optional[Artifact]: The chosen artifact, or None when there is nothing to choose from.
    """
    if not candidates:
        print("No installable artifacts found in this release.")
        return None

    title = "Select an artifact (use arrow keys, ENTER to confirm):"
    options = [describe_candidate(candidate) for candidate in candidates]
    _option, index = pick(options, title, indicator="*")
    return candidates[index].artifact


def run_menu(candidates: List[ScoredCandidate]) -> Optional[Artifact]:
    """
    Prompt the user to pick an artifact and return it.

    Returns None if nothing was chosen or the prompt fails (errors are logged).
    """
    try:
        return select_artifact(candidates)
    except Exception:
        logger.exception("Artifact menu failed")
        return None
