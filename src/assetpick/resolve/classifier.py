"""
Pattern Classifier

Maps an artifact file name to a platform tag and an architecture tag using
ordered rule tables. Tokens must be bounded by a word boundary or by one of the
separators ``_`` and ``-`` so that ``win`` never matches inside ``darwin``.
"""

import re
from typing import Pattern, Tuple

from .interfaces import Arch, Libc, Platform

# Left boundary: start of a word, or an explicit separator
_LEFT = r"(?:\b|[_-])"
# Right boundary: end of a word, or an explicit separator
_RIGHT = r"(?:\b|[_-])"
# Right boundary for OS tokens that may carry a bitness suffix (win32, linux64)
_RIGHT_BITS = r"(?:\b|[_-]|32|64)"


def _token_rule(alternatives: str, right: str = _RIGHT) -> Pattern[str]:
    return re.compile(f"{_LEFT}(?:{alternatives}){right}", re.IGNORECASE)


# First match wins
PLATFORM_RULES: Tuple[Tuple[Platform, Pattern[str]], ...] = (
    (Platform.WINDOWS, _token_rule(r"windows|win", _RIGHT_BITS)),
    (Platform.MACOS, _token_rule(r"darwin|macos|osx|apple")),
    (Platform.LINUX, _token_rule(r"linux", _RIGHT_BITS)),
)

# arm64 is checked before x64 so that rarer, more specific tokens win
ARCH_RULES: Tuple[Tuple[Arch, Pattern[str]], ...] = (
    (Arch.ARM64, _token_rule(r"aarch64|arm64")),
    (Arch.X64, _token_rule(r"x86[_-]?64|x64|amd64")),
    (Arch.X86, _token_rule(r"i[3-6]86|x86[_-]?32|386")),
    (Arch.UNIVERSAL, _token_rule(r"universal|all")),
)

LIBC_RULES: Tuple[Tuple[Libc, Pattern[str]], ...] = (
    (Libc.MUSL, _token_rule(r"musl")),
    (Libc.GLIBC, _token_rule(r"gnu|glibc")),
)

_PLATFORM_LABELS = {
    Platform.WINDOWS: "Windows",
    Platform.MACOS: "macOS",
    Platform.LINUX: "Linux",
}

_ARCH_LABELS = {
    Arch.X64: "x64",
    Arch.ARM64: "ARM64",
    Arch.X86: "x86",
    Arch.UNIVERSAL: "Universal",
}


def classify_platform(name: str) -> Platform:
    """
    Return the operating-system family encoded in an artifact name.

    Parameters:
        name (str): Artifact file name, e.g. "app-darwin-arm64.tar.gz".

    Returns:
        Platform: The first matching platform, or Platform.UNKNOWN when no OS token is present.
    """
    for platform, pattern in PLATFORM_RULES:
        if pattern.search(name or ""):
            return platform
    return Platform.UNKNOWN


def classify_arch(name: str) -> Arch:
    """
    Return the CPU architecture encoded in an artifact name.

    Runs independently of classify_platform over the same name.

    Returns:
        Arch: The first matching architecture, or Arch.UNKNOWN when no architecture token is present.
    """
    for arch, pattern in ARCH_RULES:
        if pattern.search(name or ""):
            return arch
    return Arch.UNKNOWN


def classify_libc(name: str) -> Libc:
    """Return the C library an artifact name targets (musl beats gnu when both appear)."""
    for libc, pattern in LIBC_RULES:
        if pattern.search(name or ""):
            return libc
    return Libc.UNKNOWN


def platform_label(platform: Platform) -> str:
    """Human-readable platform name; empty for unknown."""
    return _PLATFORM_LABELS.get(platform, "")


def arch_label(arch: Arch) -> str:
    """Human-readable architecture name; empty for unknown."""
    return _ARCH_LABELS.get(arch, "")
