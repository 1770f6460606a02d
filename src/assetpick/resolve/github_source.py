"""
GitHub Release Source

Supplies raw artifact descriptors from the GitHub Releases API. Only release
metadata is listed here; nothing is downloaded.
"""

from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests  # type: ignore[import-untyped]

from assetpick.constants import (
    GITHUB_API_BASE,
    GITHUB_RELEASES_PER_PAGE,
    RELEASES_CACHE_EXPIRY_SECONDS,
)
from assetpick.exceptions import (
    APIError,
    AuthenticationError,
    NetworkError,
    RateLimitError,
    RepositoryReferenceError,
    ResourceNotFoundError,
)
from assetpick.log_utils import logger
from assetpick.utils import make_github_api_request, parse_repo_url

from .cache import CacheManager
from .interfaces import Artifact, ArtifactSource, Release


class GithubArtifactSource(ArtifactSource):
    """
    Lists releases and their artifacts for one GitHub repository, with caching.

    Usage:
        source = GithubArtifactSource("owner/repo", config, CacheManager())
        artifacts = source.get_artifacts(tag="v1.2.3")
    """

    def __init__(
        self,
        repo: str,
        config: Optional[Dict[str, Any]] = None,
        cache_manager: Optional[CacheManager] = None,
    ):
        """
        Initialize the GitHub artifact source.

        Parameters:
            repo (str): Repository reference ("owner/repo" or a GitHub URL).
            config (Optional[Dict[str, Any]]): Configuration dictionary providing GITHUB_TOKEN and ALLOW_ENV_TOKEN.
            cache_manager (Optional[CacheManager]): Cache for API payloads; None disables caching.

        Raises:
            RepositoryReferenceError: If `repo` is not a recognizable repository reference.
        """
        parsed = parse_repo_url(repo)
        if parsed is None:
            raise RepositoryReferenceError(
                f"Not a GitHub repository reference: {repo}", field="repo", value=repo
            )
        self.owner, self.repo = parsed
        self.config = config or {}
        self.cache_manager = cache_manager

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def releases_url(self) -> str:
        return f"{GITHUB_API_BASE}/{self.owner}/{self.repo}/releases"

    def get_releases(self, limit: Optional[int] = None) -> List[Release]:
        """
        Fetch releases newest first, skipping malformed entries.

        Raises:
            APIError: If the API response is not a list of releases.
        """
        per_page = min(limit, GITHUB_RELEASES_PER_PAGE) if limit else GITHUB_RELEASES_PER_PAGE
        payload = self._get_json(self.releases_url, {"per_page": per_page})
        if not isinstance(payload, list):
            raise APIError(
                "Invalid releases data received from GitHub API",
                endpoint=self.releases_url,
            )

        releases: List[Release] = []
        for release_data in payload:
            if not isinstance(release_data, dict):
                logger.warning(
                    "Skipping malformed release entry from %s: expected dict, got %s",
                    self.releases_url,
                    type(release_data).__name__,
                )
                continue
            release = create_release_from_github_data(release_data)
            if release is not None:
                releases.append(release)

        return releases[:limit] if limit else releases

    def get_release(self, tag: Optional[str] = None) -> Release:
        """
        Fetch the release identified by `tag`, or the latest published release.

        Raises:
            ResourceNotFoundError: If the repository or release does not exist.
            APIError: If the payload is not a release.
        """
        if tag:
            url = f"{self.releases_url}/tags/{quote(tag, safe='')}"
        else:
            url = f"{self.releases_url}/latest"

        payload = self._get_json(url)
        if not isinstance(payload, dict):
            raise APIError("Invalid release data received from GitHub API", endpoint=url)

        release = create_release_from_github_data(payload)
        if release is None:
            raise APIError("Release payload is missing a tag name", endpoint=url)
        logger.debug(
            "Release %s of %s has %d artifacts",
            release.tag_name,
            self.full_name,
            len(release.artifacts),
        )
        return release

    def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Return the decoded JSON payload for `url`, from cache when fresh.

        Translates requests failures into the assetpick exception hierarchy.
        """
        cache_key = CacheManager.build_url_cache_key(url, params)
        if self.cache_manager is not None:
            cached = self.cache_manager.read_cache_entry(
                cache_key, expiry_seconds=RELEASES_CACHE_EXPIRY_SECONDS
            )
            if cached is not None:
                return cached

        payload = self._fetch_from_api(url, params)

        if self.cache_manager is not None:
            self.cache_manager.write_cache_entry(cache_key, payload)
        return payload

    def _fetch_from_api(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        try:
            response = make_github_api_request(
                url,
                self.config.get("GITHUB_TOKEN"),
                allow_env_token=self.config.get("ALLOW_ENV_TOKEN", True),
                params=params,
            )
            return response.json()
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            if status == 404:
                raise ResourceNotFoundError(
                    f"Not found on GitHub: {self.full_name}",
                    endpoint=url,
                    status_code=status,
                ) from exc
            if status == 401:
                raise AuthenticationError(
                    "GitHub rejected the credentials", endpoint=url, status_code=status
                ) from exc
            if status == 403 and "rate limit" in str(exc).lower():
                raise RateLimitError(str(exc), endpoint=url) from exc
            raise APIError(
                "GitHub API request failed",
                endpoint=url,
                status_code=status,
                details=str(exc),
            ) from exc
        except ValueError as exc:
            # requests' JSONDecodeError is also a RequestException
            raise APIError(
                "GitHub API returned invalid JSON", endpoint=url, details=str(exc)
            ) from exc
        except requests.RequestException as exc:
            raise NetworkError(
                "Could not reach the GitHub API", endpoint=url, details=str(exc)
            ) from exc


def create_artifact_from_github_data(asset_data: Dict[str, Any]) -> Optional[Artifact]:
    """
    Create an Artifact from one entry of a GitHub release's "assets" array.

    Returns:
        Optional[Artifact]: The artifact, or None when the name or size is missing/invalid.
    """
    name = asset_data.get("name")
    if not isinstance(name, str) or not name.strip():
        return None
    try:
        size = int(asset_data.get("size"))
    except (TypeError, ValueError):
        return None

    download_count = asset_data.get("download_count")
    return Artifact(
        id=asset_data.get("id") or 0,
        name=name,
        size=size,
        download_url=asset_data.get("browser_download_url") or "",
        content_type=asset_data.get("content_type"),
        download_count=download_count if isinstance(download_count, int) else None,
    )


def create_release_from_github_data(release_data: Dict[str, Any]) -> Optional[Release]:
    """
    Create a Release from GitHub API release data, keeping every valid asset.

    Returns:
        Optional[Release]: The release, or None when the tag name is missing/invalid.
        Releases without assets are kept; they simply rank nothing.
    """
    tag_name = release_data.get("tag_name")
    if not isinstance(tag_name, str) or not tag_name.strip():
        logger.warning("Skipping release with missing or invalid tag_name")
        return None

    release = Release(
        tag_name=tag_name,
        id=release_data.get("id"),
        name=release_data.get("name"),
        prerelease=bool(release_data.get("prerelease", False)),
        draft=bool(release_data.get("draft", False)),
        published_at=release_data.get("published_at"),
    )

    assets_data = release_data.get("assets")
    if not isinstance(assets_data, list):
        return release

    for asset_data in assets_data:
        if not isinstance(asset_data, dict):
            logger.warning("Skipping malformed asset for release %s", tag_name)
            continue
        artifact = create_artifact_from_github_data(asset_data)
        if artifact is None:
            logger.warning(
                "Skipping asset with invalid name or size for release %s", tag_name
            )
            continue
        release.artifacts.append(artifact)

    return release
