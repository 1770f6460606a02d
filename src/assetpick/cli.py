# src/assetpick/cli.py

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from assetpick import config as config_module
from assetpick import log_utils, menu_assets
from assetpick.constants import RECOMMENDATION_THRESHOLD
from assetpick.exceptions import AssetPickError, ConfigurationError
from assetpick.resolve.cache import CacheManager
from assetpick.resolve.classifier import (
    arch_label,
    classify_arch,
    classify_platform,
    platform_label,
)
from assetpick.resolve.github_source import GithubArtifactSource
from assetpick.resolve.interfaces import Artifact, Libc, Platform, RuntimeContext
from assetpick.resolve.runtime import RuntimeContextProvider
from assetpick.resolve.scoring import best_match, get_recommended_asset, parse_assets

PLATFORM_CHOICES = ("windows", "macos", "linux")
ARCH_CHOICES = ("x64", "arm64", "x86")
LIBC_CHOICES = ("glibc", "musl")


def _load_config() -> Optional[Dict[str, Any]]:
    """
    Load the configuration file and apply its logging settings.

    Returns:
        dict | None: The configuration, or None if it could not be loaded (the error is logged).
    """
    try:
        config = config_module.load_config()
    except ConfigurationError as error:
        log_utils.logger.error(f"Failed to load configuration: {error}")
        return None

    if config.get("LOG_LEVEL"):
        log_utils.set_log_level(config["LOG_LEVEL"])
    if config.get("LOG_DIR"):
        log_utils.add_file_logging(
            Path(config["LOG_DIR"]), config.get("LOG_LEVEL") or "INFO"
        )
    return config


def _resolve_context(args: argparse.Namespace, config: Dict[str, Any]) -> RuntimeContext:
    """Resolve the runtime context, letting CLI flags override configured overrides."""
    overrides = config_module.runtime_overrides(config)
    for key in ("platform", "arch", "libc"):
        value = getattr(args, key, None)
        if value:
            overrides[key] = value
    provider = RuntimeContextProvider(overrides=overrides)
    return asyncio.run(provider.resolve())


def _fetch_artifacts(args: argparse.Namespace, config: Dict[str, Any]) -> List[Artifact]:
    cache_manager = CacheManager(config.get("CACHE_DIR"))
    source = GithubArtifactSource(args.repo, config, cache_manager)
    release = source.get_release(args.tag)
    log_utils.logger.info(
        f"{source.full_name} {release.tag_name}: {len(release.artifacts)} artifacts"
    )
    return list(release.artifacts)


def _describe_context(context: RuntimeContext) -> str:
    parts = [
        platform_label(context.platform) or "unknown platform",
        arch_label(context.arch) or "unknown architecture",
    ]
    if context.platform is Platform.LINUX and context.libc is not Libc.UNKNOWN:
        parts.append(context.libc.value)
    return " ".join(parts)


def run_detect(args: argparse.Namespace, config: Dict[str, Any]) -> int:
    context = _resolve_context(args, config)
    log_utils.logger.info(f"Runtime context: {_describe_context(context)}")
    if not context.is_known:
        log_utils.logger.warning(
            "Host could not be fully identified; no artifact will be recommended."
        )
    return 0


def run_classify(args: argparse.Namespace) -> int:
    for name in args.names:
        platform = classify_platform(name)
        arch = classify_arch(name)
        log_utils.logger.info(
            f"{name}: platform={platform.value} arch={arch.value}"
        )
    return 0


def run_rank(args: argparse.Namespace, config: Dict[str, Any]) -> int:
    """Log every installable artifact of the release, best first."""
    context = _resolve_context(args, config)
    artifacts = _fetch_artifacts(args, config)
    candidates = parse_assets(artifacts, context)
    log_utils.logger.info(f"Ranking for {_describe_context(context)}:")

    show_rejected = config.get("SHOW_REJECTED", True) and not args.hide_rejected
    shown = 0
    for position, candidate in enumerate(candidates, start=1):
        if candidate.score == 0 and not show_rejected:
            continue
        log_utils.logger.info(f"{position:>3}. {menu_assets.describe_candidate(candidate)}")
        shown += 1

    if shown == 0:
        log_utils.logger.info("No installable artifacts to show.")
    return 0


def run_recommend(args: argparse.Namespace, config: Dict[str, Any]) -> int:
    """Print the recommended artifact's URL; exit status 1 when nothing qualifies."""
    context = _resolve_context(args, config)
    artifacts = _fetch_artifacts(args, config)
    recommended = get_recommended_asset(artifacts, context)
    if recommended is not None:
        log_utils.logger.info(f"Recommended: {recommended.name}")
        print(recommended.download_url)
        return 0

    closest = best_match(artifacts, context)
    log_utils.logger.warning(
        f"No artifact reaches the recommendation threshold ({RECOMMENDATION_THRESHOLD}) "
        f"for {_describe_context(context)}."
    )
    if closest is not None:
        log_utils.logger.info(
            f"Closest match: {closest.artifact.name} (score {closest.score})"
        )
    return 1


def run_select(args: argparse.Namespace, config: Dict[str, Any]) -> int:
    context = _resolve_context(args, config)
    artifacts = _fetch_artifacts(args, config)
    chosen = menu_assets.run_menu(parse_assets(artifacts, context))
    if chosen is None:
        return 1
    print(chosen.download_url)
    return 0


def run_cache_clear(config: Dict[str, Any]) -> int:
    cache_manager = CacheManager(config.get("CACHE_DIR"))
    if cache_manager.clear_all_caches():
        log_utils.logger.info(f"Cleared cached release data in {cache_manager.cache_dir}")
        return 0
    log_utils.logger.error("Failed to clear cached release data.")
    return 1


def _add_context_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--platform", choices=PLATFORM_CHOICES, help="Rank as if running on this OS"
    )
    parser.add_argument(
        "--arch", choices=ARCH_CHOICES, help="Rank as if running on this CPU architecture"
    )
    parser.add_argument(
        "--libc", choices=LIBC_CHOICES, help="Rank as if running with this C library"
    )


def _add_release_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("repo", help="GitHub repository (owner/repo or URL)")
    parser.add_argument(
        "--tag", help="Release tag to inspect (defaults to the latest release)"
    )
    _add_context_arguments(parser)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="assetpick - pick the right release artifact for this machine"
    )
    subparsers = parser.add_subparsers(dest="command")

    detect_parser = subparsers.add_parser(
        "detect", help="Show the detected platform and architecture"
    )
    _add_context_arguments(detect_parser)

    classify_parser = subparsers.add_parser(
        "classify", help="Classify artifact file names without contacting GitHub"
    )
    classify_parser.add_argument("names", nargs="+", metavar="NAME")

    rank_parser = subparsers.add_parser(
        "rank", help="Rank every artifact of a release for this machine"
    )
    _add_release_arguments(rank_parser)
    rank_parser.add_argument(
        "--hide-rejected",
        action="store_true",
        help="Hide artifacts that cannot run on this machine",
    )

    recommend_parser = subparsers.add_parser(
        "recommend", help="Print the download URL of the recommended artifact"
    )
    _add_release_arguments(recommend_parser)

    select_parser = subparsers.add_parser(
        "select", help="Interactively choose an artifact from the ranking"
    )
    _add_release_arguments(select_parser)

    cache_parser = subparsers.add_parser(
        "cache",
        help="Manage cached data",
        description="Clear cached GitHub release listings.",
    )
    cache_subparsers = cache_parser.add_subparsers(dest="cache_command", required=True)
    cache_subparsers.add_parser("clear", help="Remove cached release listings")

    subparsers.add_parser("version", help="Display assetpick version")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """
    Entry point for the assetpick command-line interface.

    Parses arguments, loads configuration, dispatches the subcommand and exits
    with its status. Application errors are logged and exit with status 1.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)
    if args.command == "version":
        log_utils.logger.info(f"assetpick {get_assetpick_version()}")
        sys.exit(0)
    if args.command == "classify":
        sys.exit(run_classify(args))

    config = _load_config()
    if config is None:
        sys.exit(1)

    handlers = {
        "detect": run_detect,
        "rank": run_rank,
        "recommend": run_recommend,
        "select": run_select,
    }
    try:
        if args.command == "cache":
            status = run_cache_clear(config)
        else:
            status = handlers[args.command](args, config)
    except AssetPickError as error:
        log_utils.logger.error(str(error))
        status = 1
    sys.exit(status)


def get_assetpick_version() -> str:
    """
    Retrieve the installed assetpick package version.

    Returns:
        version (str): The installed version string, or "unknown" if it cannot be determined.
    """
    from importlib.metadata import PackageNotFoundError, version

    try:
        return version("assetpick")
    except PackageNotFoundError:
        return "unknown"


if __name__ == "__main__":
    main()
