"""
Constants and configuration values for assetpick.

This module contains the scoring weights, file-name rules, URLs, timeouts,
and other constants used throughout the application.
"""

# GitHub API URLs
GITHUB_API_BASE = "https://api.github.com/repos"
GITHUB_WEB_BASE = "github.com"

# Network timeouts and delays (in seconds)
GITHUB_API_TIMEOUT = 10
API_CALL_DELAY = 0.1  # Small delay to be respectful to GitHub API
GITHUB_RELEASES_PER_PAGE = 30

# Retry settings for transient GitHub API failures
DEFAULT_CONNECT_RETRIES = 3
DEFAULT_BACKOFF_FACTOR = 0.3
RETRY_STATUS_CODES = (500, 502, 503, 504)

# Scoring weights
SCORE_PLATFORM_EXACT = 100
SCORE_PLATFORM_UNKNOWN = 10
SCORE_PLATFORM_EMULATED = 50
SCORE_ARCH_EXACT = 50
SCORE_ARCH_UNIVERSAL = 40
SCORE_ARCH_UNKNOWN = 5
SCORE_ARCH_EMULATED = 30
SCORE_REJECTED = 0

# Platform (100) + Arch (50) minus a margin
RECOMMENDATION_THRESHOLD = 140

# Libc term, Linux hosts only
SCORE_LIBC_EXACT = 30
SCORE_LIBC_INCOMPATIBLE = -100
SCORE_LIBC_MUSL_ON_GLIBC = 10
SCORE_LIBC_UNTAGGED_ON_GLIBC = 15

# Checksum, signature and manifest side files that are never installable
EXCLUDED_SUFFIXES = (
    "sha256",
    "sha512",
    "sha1",
    "md5",
    "sig",
    "asc",
    "gpg",
    "minisig",
    "sbom",
)

# Container format preference, checked in order
FORMAT_PREFERENCES = (
    ((".tar.gz", ".tgz"), 10),
    ((".tar.xz", ".txz"), 9),
    ((".zip",), 8),
    ((".exe", ".msi"), 7),
    ((".dmg", ".pkg"), 7),
    ((".tar.bz2", ".tbz2"), 6),
    ((".tar.zst",), 6),
    ((".deb", ".rpm", ".appimage"), 5),
)

# Host strings reported by platform.system() / platform.machine() and friends
HOST_PLATFORM_ALIASES = {
    "windows": ("windows", "win32", "win64", "cygwin", "msys"),
    "macos": ("darwin", "macos", "osx", "mac"),
    "linux": ("linux",),
}
HOST_ARCH_ALIASES = {
    "x64": ("x86_64", "amd64", "x64"),
    "arm64": ("aarch64", "arm64", "armv8"),
    "x86": ("x86", "i386", "i486", "i586", "i686"),
}

# Runtime context states
RUNTIME_STATE_PENDING = "pending"
RUNTIME_STATE_RESOLVED = "resolved"

# Cache configuration
RELEASES_CACHE_FILE = "releases_cache.json"
RELEASES_CACHE_EXPIRY_SECONDS = 60

# Logging configuration
LOGGER_NAME = "assetpick"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
INFO_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DEBUG_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s: %(message)s"
LOG_FILE_NAME = "assetpick.log"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
LOG_FILE_BACKUP_COUNT = 5

# Configuration file names
APP_NAME = "assetpick"
CONFIG_FILE_NAME = "assetpick.yaml"

# Environment variable names
LOG_LEVEL_ENV_VAR = "ASSETPICK_LOG_LEVEL"
GITHUB_TOKEN_ENV_VAR = "GITHUB_TOKEN"
