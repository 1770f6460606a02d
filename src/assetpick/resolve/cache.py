"""
Cache Management for GitHub release listings

Release metadata rarely changes within a minute, so API payloads are kept in a
single JSON file keyed by request URL and expire after a short interval.
"""

import json
import os
import tempfile
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import platformdirs

from assetpick.constants import APP_NAME, RELEASES_CACHE_FILE
from assetpick.exceptions import ConfigurationError
from assetpick.log_utils import logger


def _parse_iso_datetime_utc(value: Any) -> Optional[datetime]:
    """
    Parse an ISO 8601 timestamp and normalize it to UTC.

    Returns:
        A timezone-aware datetime in UTC if parsing succeeds, `None` otherwise.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except (ValueError, TypeError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _atomic_write_json(file_path: str, data: Dict[str, Any]) -> bool:
    """
    Write `data` as JSON to a temporary file and atomically replace `file_path` with it.

    Returns:
        bool: `True` if the write and replace succeeded, `False` on any error.
    """
    try:
        temp_fd, temp_path = tempfile.mkstemp(
            dir=os.path.dirname(file_path), prefix="tmp-", suffix=".tmp"
        )
    except OSError as e:
        logger.error(f"Could not create temporary file for {file_path}: {e}")
        return False

    try:
        with os.fdopen(temp_fd, "w", encoding="utf-8") as temp_f:
            json.dump(data, temp_f, indent=2)
        os.replace(temp_path, file_path)
    except (OSError, TypeError, ValueError) as e:
        logger.error(f"Could not write to {file_path}: {e}")
        return False
    finally:
        if os.path.exists(temp_path):
            try:
                os.remove(temp_path)
            except OSError:
                pass
    return True


class CacheManager:
    """
    Manages the on-disk cache of GitHub API payloads.

    Cache file schema:
      { "<url>?per_page=n": { "payload": <list or dict>, "cached_at": "<iso-8601 UTC>" }, ... }
    """

    def __init__(self, cache_dir: Optional[str] = None):
        """
        Initialize the CacheManager with a cache directory.

        Parameters:
            cache_dir (Optional[str]): Path to use for on-disk caches. If None, the platformdirs user cache directory is used.
        """
        self.cache_dir = cache_dir or platformdirs.user_cache_dir(APP_NAME)
        self._ensure_cache_dir_exists()

    @property
    def cache_file(self) -> str:
        return os.path.join(self.cache_dir, RELEASES_CACHE_FILE)

    def _ensure_cache_dir_exists(self) -> None:
        """
        Ensure the cache directory exists, creating it if necessary.

        Raises:
            ConfigurationError: If the directory cannot be created.
        """
        try:
            os.makedirs(self.cache_dir, exist_ok=True)
        except OSError as e:
            raise ConfigurationError(
                f"Could not create cache directory {self.cache_dir}", details=str(e)
            ) from e

    @staticmethod
    def build_url_cache_key(url: str, params: Optional[Dict[str, Any]] = None) -> str:
        """
        Create a stable cache key by appending URL-encoded query parameters to the base URL.

        Entries whose value is None are omitted; parameters are sorted so key order does not matter.
        """
        if not params:
            return url
        filtered = {k: v for k, v in sorted(params.items()) if v is not None}
        if not filtered:
            return url
        return f"{url}?{urlencode(filtered)}"

    def _read_cache(self) -> Dict[str, Any]:
        try:
            with open(self.cache_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.debug(f"Ignoring unreadable cache file {self.cache_file}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def read_cache_entry(self, url_cache_key: str, *, expiry_seconds: int) -> Optional[Any]:
        """
        Return the cached payload for `url_cache_key` if it exists and is younger than `expiry_seconds`.

        Returns:
            The cached payload, or None when missing, malformed or expired.
        """
        entry = self._read_cache().get(url_cache_key)
        if not isinstance(entry, dict) or "payload" not in entry:
            return None

        cached_at = _parse_iso_datetime_utc(entry.get("cached_at"))
        if cached_at is None:
            return None

        age_s = (datetime.now(timezone.utc) - cached_at).total_seconds()
        if age_s >= expiry_seconds:
            logger.debug("Cache entry for %s expired %.0fs ago", url_cache_key, age_s - expiry_seconds)
            return None

        logger.debug("Using cached payload for %s", url_cache_key)
        return entry["payload"]

    def write_cache_entry(self, url_cache_key: str, payload: Any) -> bool:
        """Store `payload` under `url_cache_key` with the current UTC time."""
        cache = self._read_cache()
        cache[url_cache_key] = {
            "payload": payload,
            "cached_at": datetime.now(timezone.utc).isoformat(),
        }
        return _atomic_write_json(self.cache_file, cache)

    def clear_all_caches(self) -> bool:
        """
        Remove all cache files with .json or .tmp extensions from the cache directory.

        Returns:
            bool: `True` if every targeted file was removed or none were present, `False` otherwise.
        """
        try:
            with os.scandir(self.cache_dir) as it:
                for entry in it:
                    if entry.name.endswith((".json", ".tmp")):
                        try:
                            os.remove(entry.path)
                        except OSError as e:
                            logger.error(f"Could not remove cache file {entry.name}: {e}")
                            return False
            return True
        except OSError as e:
            logger.error(f"Could not clear cache directory {self.cache_dir}: {e}")
            return False
