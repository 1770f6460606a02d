# src/assetpick/utils.py
import importlib.metadata
import os
import re
import threading
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry  # type: ignore

from assetpick.constants import (
    API_CALL_DELAY,
    DEFAULT_BACKOFF_FACTOR,
    DEFAULT_CONNECT_RETRIES,
    GITHUB_API_TIMEOUT,
    GITHUB_TOKEN_ENV_VAR,
    GITHUB_WEB_BASE,
    RETRY_STATUS_CODES,
)
from assetpick.log_utils import logger

# Cache for the User-Agent string to avoid repeated metadata lookups
_USER_AGENT_CACHE = None

# Thread-safe token warning tracking
_token_warning_shown = False
_token_warning_lock = threading.Lock()

_OWNER_REPO_RX = re.compile(r"^[A-Za-z0-9_.-]+$")

_SIZE_UNITS = (
    ("TB", 1024**4),
    ("GB", 1024**3),
    ("MB", 1024**2),
    ("KB", 1024),
)


def get_user_agent() -> str:
    """
    Get the User-Agent string used for HTTP requests.

    Returns:
        The string `assetpick/{version}`, where `{version}` is the installed package version or `unknown`.
    """
    global _USER_AGENT_CACHE

    if _USER_AGENT_CACHE is None:
        try:
            app_version = importlib.metadata.version("assetpick")
        except importlib.metadata.PackageNotFoundError:
            app_version = "unknown"

        _USER_AGENT_CACHE = f"assetpick/{app_version}"

    return _USER_AGENT_CACHE


def get_effective_github_token(
    github_token: Optional[str], allow_env_token: bool = True
) -> Optional[str]:
    """
    Determine the GitHub token to use, preferring the explicit argument over the environment.

    Parameters:
        github_token (Optional[str]): Explicit token to use; leading and trailing whitespace are ignored.
        allow_env_token (bool): If True, fall back to the `GITHUB_TOKEN` environment variable when no explicit token is provided.

    Returns:
        Optional[str]: The chosen token with surrounding whitespace removed, or `None` if no token is available.
    """
    candidate = (github_token or "").strip()
    if candidate:
        return candidate
    if not allow_env_token:
        return None
    env_token = os.environ.get(GITHUB_TOKEN_ENV_VAR)
    return env_token.strip() if env_token else None


def _show_token_warning_if_needed(effective_token: Optional[str]) -> None:
    """Log a one-time note when no GitHub token is available."""
    if effective_token:
        return
    global _token_warning_shown
    with _token_warning_lock:
        if not _token_warning_shown:
            logger.debug(
                "No GITHUB_TOKEN found - using unauthenticated API requests (60/hour limit). "
                "Release listings are cached, so this is fine for normal usage."
            )
            _token_warning_shown = True


def _parse_rate_limit_header(header_value: Any) -> Optional[int]:
    """Parse an X-RateLimit-* header value into an int, or None when it is absent or malformed."""
    if header_value is None:
        return None
    try:
        return int(str(header_value).strip())
    except (TypeError, ValueError):
        return None


def _build_session() -> requests.Session:
    """Create a session that retries transient server errors with exponential backoff."""
    retry = Retry(
        total=DEFAULT_CONNECT_RETRIES,
        backoff_factor=DEFAULT_BACKOFF_FACTOR,
        status_forcelist=RETRY_STATUS_CODES,
        allowed_methods=frozenset(["GET"]),
        raise_on_status=False,
    )
    session = requests.Session()
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


def make_github_api_request(
    url: str,
    github_token: Optional[str] = None,
    allow_env_token: bool = True,
    params: Optional[Dict[str, Any]] = None,
    timeout: Optional[int] = None,
    _is_retry: bool = False,
) -> requests.Response:
    """
    Perform a GitHub API GET request with optional token authentication.

    A 401 with a token is retried once without authentication. A 403 with an
    exhausted rate limit is re-raised with a message naming the reset time.
    Transient 5xx responses are retried by the session adapter.

    Parameters:
        url (str): GitHub API URL to request.
        github_token (Optional[str]): Explicit GitHub token to prefer for Authorization; trimmed before use.
        allow_env_token (bool): If True, allow falling back to the GITHUB_TOKEN environment variable.
        params (Optional[Dict[str, Any]]): Query parameters to include in the request.
        timeout (Optional[int]): Request timeout in seconds; if omitted the module default is used.

    Returns:
        requests.Response: The HTTP response returned by GitHub.

    Raises:
        requests.HTTPError: For HTTP error responses.
        requests.RequestException: For lower-level network or request errors.
    """
    headers = {
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": "2022-11-28",
        "User-Agent": get_user_agent(),
    }

    effective_token = get_effective_github_token(github_token, allow_env_token)
    if effective_token:
        headers["Authorization"] = f"token {effective_token}"
        logger.debug("Using GitHub token for API authentication")
    _show_token_warning_if_needed(effective_token)

    session = _build_session()
    try:
        logger.debug(f"Making GitHub API request: {url}")
        response = session.get(
            url, timeout=timeout or GITHUB_API_TIMEOUT, headers=headers, params=params
        )
        response.raise_for_status()
    except requests.HTTPError as e:
        status = e.response.status_code if e.response is not None else None
        if not _is_retry and status == 401 and effective_token:
            logger.warning(
                f"GitHub token authentication failed for {url}. Retrying without authentication."
            )
            return make_github_api_request(
                url,
                github_token=None,
                allow_env_token=False,
                params=params,
                timeout=timeout,
                _is_retry=True,
            )
        if status == 403:
            remaining = _parse_rate_limit_header(
                e.response.headers.get("X-RateLimit-Remaining")
            )
            if remaining == 0:
                reset_time = _parse_rate_limit_header(
                    e.response.headers.get("X-RateLimit-Reset")
                )
                reset_time_str = (
                    datetime.fromtimestamp(reset_time, timezone.utc).strftime(
                        "%Y-%m-%d %H:%M:%S UTC"
                    )
                    if reset_time is not None
                    else "unknown"
                )
                error_msg = (
                    f"GitHub API rate limit exceeded. Resets at {reset_time_str}. "
                    f"Set GITHUB_TOKEN environment variable for higher rate limits."
                )
            else:
                error_msg = "GitHub API access forbidden"
            raise requests.HTTPError(error_msg, response=e.response) from None
        raise
    finally:
        session.close()
        # Small delay to be respectful to GitHub API, even on errors
        time.sleep(API_CALL_DELAY)

    remaining = _parse_rate_limit_header(
        getattr(response, "headers", {}).get("X-RateLimit-Remaining")
    )
    if remaining is not None:
        logger.debug(f"GitHub API rate-limit remaining: {remaining}")
        if remaining <= 10:
            logger.warning(
                f"GitHub API rate limit running low: {remaining} requests remaining"
            )

    return response


def parse_repo_url(text: str) -> Optional[Tuple[str, str]]:
    """
    Extract (owner, repo) from a repository reference.

    Accepts "owner/repo", "https://github.com/owner/repo[/...]",
    "http://github.com/owner/repo" and "git@github.com:owner/repo.git".

    Returns:
        Optional[Tuple[str, str]]: The owner and repository names, or None when the reference is not recognized.
    """
    value = (text or "").strip()
    if not value:
        return None

    path = None
    for prefix in (f"https://{GITHUB_WEB_BASE}/", f"http://{GITHUB_WEB_BASE}/"):
        if value.startswith(prefix):
            path = value[len(prefix) :]
            break
    if path is None and value.startswith(f"git@{GITHUB_WEB_BASE}:"):
        path = value[len(f"git@{GITHUB_WEB_BASE}:") :]
    if path is None:
        if "://" in value or value.count("/") != 1:
            return None
        path = value

    parts = [part for part in path.strip("/").split("/") if part]
    if len(parts) < 2:
        return None
    owner, repo = parts[0], parts[1]
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    if not _OWNER_REPO_RX.match(owner) or not _OWNER_REPO_RX.match(repo):
        return None
    return owner, repo


def format_size(num_bytes: int) -> str:
    """
    Format a byte count for display, e.g. 512 -> "512 B", 1536 -> "1.50 KB".

    Uses 1024-based units with two decimals above one kilobyte.
    """
    num_bytes = max(int(num_bytes or 0), 0)
    for unit, factor in _SIZE_UNITS:
        if num_bytes >= factor:
            return f"{num_bytes / factor:.2f} {unit}"
    return f"{num_bytes} B"
