"""
Runtime Context Provider

Resolves the platform/architecture pair of the current machine once and
caches it. Host-reported strings are normalized into the same tag vocabulary
the classifier uses. A failing or unavailable host query never raises: it
degrades to an unknown context, which makes the scorer recommend nothing.
"""

import asyncio
import inspect
import platform as host_platform
from typing import Any, Awaitable, Callable, Mapping, Optional, Tuple, Union

from assetpick.constants import (
    HOST_ARCH_ALIASES,
    HOST_PLATFORM_ALIASES,
    RUNTIME_STATE_PENDING,
    RUNTIME_STATE_RESOLVED,
)
from assetpick.log_utils import logger

from .interfaces import UNKNOWN_CONTEXT, Arch, Libc, Platform, RuntimeContext

HostReport = Tuple[str, str]
HostQuery = Callable[[], Union[HostReport, Awaitable[HostReport]]]

_PLATFORM_LOOKUP = {
    alias: Platform(tag) for tag, aliases in HOST_PLATFORM_ALIASES.items() for alias in aliases
}
_ARCH_LOOKUP = {
    alias: Arch(tag) for tag, aliases in HOST_ARCH_ALIASES.items() for alias in aliases
}


def normalize_platform(value: Optional[str]) -> Platform:
    """
    Map a host-reported OS string ("Linux", "Darwin", "win32", ...) to a Platform tag.

    Unrecognized or empty values map to Platform.UNKNOWN.
    """
    if not value:
        return Platform.UNKNOWN
    return _PLATFORM_LOOKUP.get(str(value).strip().lower(), Platform.UNKNOWN)


def normalize_arch(value: Optional[str]) -> Arch:
    """
    Map a host-reported machine string ("x86_64", "AMD64", "aarch64", ...) to an Arch tag.

    Unrecognized or empty values map to Arch.UNKNOWN.
    """
    if not value:
        return Arch.UNKNOWN
    return _ARCH_LOOKUP.get(str(value).strip().lower(), Arch.UNKNOWN)


def normalize_libc(value: Optional[str]) -> Libc:
    """Map a libc name as reported by platform.libc_ver() or given by the user."""
    if not value:
        return Libc.UNKNOWN
    lowered = str(value).strip().lower()
    if lowered in ("glibc", "gnu"):
        return Libc.GLIBC
    if lowered == "musl":
        return Libc.MUSL
    return Libc.UNKNOWN


def query_host() -> HostReport:
    """Report the host OS family and machine type as Python's platform module sees them."""
    return host_platform.system(), host_platform.machine()


def detect_libc() -> Libc:
    """
    Detect the C library of a Linux host.

    platform.libc_ver() reports ("glibc", version) on glibc systems and an empty
    name where it cannot tell, which is what musl systems usually produce.
    """
    try:
        name, _version = host_platform.libc_ver()
    except (OSError, ValueError) as exc:
        logger.debug("libc detection failed: %s", exc)
        return Libc.UNKNOWN
    return normalize_libc(name)


class RuntimeContextProvider:
    """
    Resolves and caches the runtime context for the lifetime of the provider.

    The context stays unresolved (state "pending") until resolve() completes;
    callers that need to show a loading phase can check `is_resolved`.
    Re-resolution only happens through an explicit refresh().
    """

    def __init__(
        self,
        host_query: Optional[HostQuery] = None,
        overrides: Optional[Mapping[str, Any]] = None,
        libc_detector: Optional[Callable[[], Libc]] = None,
    ):
        """
        Initialize the provider.

        Parameters:
            host_query (Optional[HostQuery]): Callable returning (os, arch) strings, or an awaitable of them.
                Defaults to query_host() run in a worker thread.
            overrides (Optional[Mapping[str, Any]]): Optional "platform", "arch" and "libc" strings that
                replace the host-reported values after normalization.
            libc_detector (Optional[Callable[[], Libc]]): Used on Linux hosts; defaults to detect_libc().
        """
        self._host_query = host_query
        self._overrides = dict(overrides or {})
        self._libc_detector = libc_detector or detect_libc
        self._context: Optional[RuntimeContext] = None
        self._lock = asyncio.Lock()

    @property
    def context(self) -> Optional[RuntimeContext]:
        """The resolved context, or None while resolution is pending."""
        return self._context

    @property
    def is_resolved(self) -> bool:
        return self._context is not None

    @property
    def state(self) -> str:
        return RUNTIME_STATE_RESOLVED if self.is_resolved else RUNTIME_STATE_PENDING

    async def resolve(self) -> RuntimeContext:
        """
        Return the runtime context, querying the host on first use only.

        Concurrent callers wait for the same query. Never raises: a failing host
        query resolves to an unknown platform and architecture.
        """
        if self._context is not None:
            return self._context
        async with self._lock:
            if self._context is None:
                self._context = await self._query()
        return self._context

    async def refresh(self) -> RuntimeContext:
        """Discard the cached context and query the host again."""
        async with self._lock:
            self._context = await self._query()
        return self._context

    async def _query(self) -> RuntimeContext:
        try:
            report = await self._run_host_query()
            os_name, machine = report
        except Exception as exc:
            # Any host failure degrades instead of propagating
            logger.warning("Could not determine host platform: %s", exc)
            return self._apply_overrides(UNKNOWN_CONTEXT)

        detected_platform = normalize_platform(os_name)
        detected_arch = normalize_arch(machine)
        if detected_platform is Platform.UNKNOWN or detected_arch is Arch.UNKNOWN:
            logger.debug("Unrecognized host report: os=%r arch=%r", os_name, machine)

        libc = Libc.UNKNOWN
        if detected_platform is Platform.LINUX:
            try:
                libc = Libc(self._libc_detector())
            except Exception as exc:
                logger.warning("Could not determine host C library: %s", exc)
                libc = Libc.UNKNOWN

        context = self._apply_overrides(
            RuntimeContext(platform=detected_platform, arch=detected_arch, libc=libc)
        )
        logger.debug(
            "Resolved runtime context: %s/%s (libc %s)",
            context.platform.value,
            context.arch.value,
            context.libc.value,
        )
        return context

    async def _run_host_query(self) -> HostReport:
        if self._host_query is None:
            return await asyncio.to_thread(query_host)
        result = self._host_query()
        if inspect.isawaitable(result):
            result = await result
        return result

    def _apply_overrides(self, context: RuntimeContext) -> RuntimeContext:
        if not self._overrides:
            return context
        platform = context.platform
        arch = context.arch
        libc = context.libc
        if self._overrides.get("platform"):
            platform = normalize_platform(self._overrides["platform"])
        if self._overrides.get("arch"):
            arch = normalize_arch(self._overrides["arch"])
        if self._overrides.get("libc"):
            libc = normalize_libc(self._overrides["libc"])
        return RuntimeContext(platform=platform, arch=arch, libc=libc)


_default_provider: Optional[RuntimeContextProvider] = None


def get_default_provider() -> RuntimeContextProvider:
    """Return the process-wide provider, creating it on first use."""
    global _default_provider
    if _default_provider is None:
        _default_provider = RuntimeContextProvider()
    return _default_provider


async def resolve_runtime_context() -> RuntimeContext:
    """Resolve the runtime context once per process through the default provider."""
    return await get_default_provider().resolve()


def reset_runtime_context() -> None:
    """Forget the process-wide context so the next resolve queries the host again."""
    global _default_provider
    _default_provider = None
