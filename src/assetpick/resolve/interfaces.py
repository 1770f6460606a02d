"""
Core Interfaces for the assetpick Resolution Engine

This module defines the tag vocabulary and the immutable records that flow
through the classifier, the runtime context provider and the scorer, plus the
abstract artifact supplier the engine consumes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class Platform(str, Enum):
    """Operating-system family of an artifact or of the host."""

    WINDOWS = "windows"
    MACOS = "macos"
    LINUX = "linux"
    UNKNOWN = "unknown"


class Arch(str, Enum):
    """CPU architecture of an artifact or of the host."""

    X64 = "x64"
    ARM64 = "arm64"
    X86 = "x86"
    UNIVERSAL = "universal"
    UNKNOWN = "unknown"


class Libc(str, Enum):
    """C library flavour, only meaningful for Linux artifacts and hosts."""

    GLIBC = "glibc"
    MUSL = "musl"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Artifact:
    """A downloadable file attached to a release, tag or branch snapshot."""

    id: int
    """Supplier-specific identifier of the artifact"""

    name: str
    """The file name of the artifact"""

    size: int
    """File size in bytes"""

    download_url: str
    """Direct URL to download the artifact"""

    content_type: Optional[str] = None
    """MIME type of the artifact"""

    download_count: Optional[int] = None
    """How often the artifact was downloaded, when the supplier reports it"""


@dataclass(frozen=True)
class RuntimeContext:
    """The resolved platform/architecture pair of the machine doing the resolution."""

    platform: Platform = Platform.UNKNOWN
    arch: Arch = Arch.UNKNOWN
    libc: Libc = Libc.UNKNOWN

    def __post_init__(self) -> None:
        # Accept plain tag strings such as "linux" from callers and config
        object.__setattr__(self, "platform", Platform(self.platform))
        object.__setattr__(self, "arch", Arch(self.arch))
        object.__setattr__(self, "libc", Libc(self.libc))

    @property
    def is_known(self) -> bool:
        """Whether both the platform and the architecture were identified."""
        return self.platform is not Platform.UNKNOWN and self.arch is not Arch.UNKNOWN


UNKNOWN_CONTEXT = RuntimeContext()


@dataclass(frozen=True)
class ScoredCandidate:
    """An artifact annotated with its classification and fitness score."""

    artifact: Artifact
    platform: Platform
    arch: Arch
    score: int
    is_recommended: bool
    is_fallback: bool


@dataclass
class Release:
    """Represents a software release and the artifacts attached to it."""

    tag_name: str
    """The release tag/version identifier (e.g., 'v2.7.8')"""

    id: Optional[int] = None
    """Supplier-specific release identifier"""

    name: Optional[str] = None
    """Human-readable release title"""

    prerelease: bool = False
    """Whether this is a prerelease version"""

    draft: bool = False
    """Whether this is an unpublished draft"""

    published_at: Optional[str] = None
    """ISO 8601 timestamp when the release was published"""

    artifacts: List[Artifact] = field(default_factory=list)
    """Downloadable artifacts for this release"""


class ArtifactSource(ABC):
    """
    Abstract base class for artifact suppliers.

    An ArtifactSource lists releases and the raw artifact descriptors attached
    to them. The resolution engine only consumes its output.
    """

    @abstractmethod
    def get_releases(self, limit: Optional[int] = None) -> List[Release]:
        """
        Retrieve available releases from the source, newest first.

        Parameters:
            limit (Optional[int]): Maximum number of releases to return; None for all.

        Returns:
            List[Release]: Releases ordered newest first.
        """

    @abstractmethod
    def get_release(self, tag: Optional[str] = None) -> Release:
        """
        Retrieve a single release by tag, or the latest release when `tag` is None.
        """

    def get_artifacts(self, tag: Optional[str] = None) -> List[Artifact]:
        """
        Return the artifacts attached to the release identified by `tag`.

        Defaults to the latest release when `tag` is None.
        """
        return list(self.get_release(tag).artifacts)
