from __future__ import annotations

import logging
import re
import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Protocol

from atucha.errors import UnsupportedRenderingError

logger = logging.getLogger(__name__)

MOBILE_USER_AGENT_PATTERN = re.compile(
    r"Android|webOS|iPhone|iPad|iPod|BlackBerry|IEMobile|Opera Mini",
    re.IGNORECASE,
)

PARAMETER_NAMES = (
    "maxTextureSize",
    "maxRenderbufferSize",
    "maxVertexUniforms",
    "maxFragmentUniforms",
)

# Host detectors report camelCase keys; snake_case is accepted for hand-written metrics.
_METRIC_ALIASES = {
    "webgl": ("webgl", "supports_basic_rendering"),
    "webgl2": ("webgl2", "supports_advanced_rendering"),
    "maxTextureSize": ("maxTextureSize", "max_texture_size"),
    "maxRenderbufferSize": ("maxRenderbufferSize", "max_renderbuffer_size"),
    "maxVertexUniforms": ("maxVertexUniforms", "max_vertex_uniforms"),
    "maxFragmentUniforms": ("maxFragmentUniforms", "max_fragment_uniforms"),
    "extensions": ("extensions", "supported_extensions"),
    "userAgent": ("userAgent", "user_agent"),
}


def _safe_int(value: object, default: int = 0) -> int:
    try:
        return int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError, OverflowError):
        return default


def is_mobile_user_agent(user_agent: str) -> bool:
    return bool(MOBILE_USER_AGENT_PATTERN.search(user_agent or ""))


@dataclass(frozen=True)
class DeviceCapabilities:
    supports_basic_rendering: bool
    supports_advanced_rendering: bool
    max_texture_size: int
    max_renderbuffer_size: int
    max_vertex_uniforms: int
    max_fragment_uniforms: int
    supported_extensions: frozenset[str] = field(default_factory=frozenset)
    is_mobile: bool = False
    user_agent: str = ""

    @staticmethod
    def minimal() -> DeviceCapabilities:
        """Snapshot used before any probe has completed."""
        return DeviceCapabilities(
            supports_basic_rendering=False,
            supports_advanced_rendering=False,
            max_texture_size=0,
            max_renderbuffer_size=0,
            max_vertex_uniforms=0,
            max_fragment_uniforms=0,
        )

    def supports_extension(self, name: str) -> bool:
        return name in self.supported_extensions

    def to_dict(self) -> dict[str, object]:
        return {
            "supports_basic_rendering": self.supports_basic_rendering,
            "supports_advanced_rendering": self.supports_advanced_rendering,
            "max_texture_size": self.max_texture_size,
            "max_renderbuffer_size": self.max_renderbuffer_size,
            "max_vertex_uniforms": self.max_vertex_uniforms,
            "max_fragment_uniforms": self.max_fragment_uniforms,
            "supported_extensions": sorted(self.supported_extensions),
            "is_mobile": self.is_mobile,
            "user_agent": self.user_agent,
        }


class RenderingBackend(Protocol):
    def supports_context(self, advanced: bool) -> bool: ...

    def get_parameter(self, name: str) -> int | None: ...

    def get_extensions(self) -> Iterable[str]: ...

    def user_agent(self) -> str: ...


class HostMetricsBackend:
    """Backend over the raw metrics the host page reports about its WebGL context."""

    def __init__(self, metrics: Mapping[str, object]) -> None:
        self._metrics = dict(metrics)

    def _lookup(self, key: str, default: object = None) -> object:
        for alias in _METRIC_ALIASES.get(key, (key,)):
            if alias in self._metrics:
                return self._metrics[alias]
        return default

    def supports_context(self, advanced: bool) -> bool:
        return bool(self._lookup("webgl2" if advanced else "webgl", False))

    def get_parameter(self, name: str) -> int | None:
        value = self._lookup(name)
        if value is None:
            return None
        return _safe_int(value)

    def get_extensions(self) -> Iterable[str]:
        raw = self._lookup("extensions", ())
        if isinstance(raw, str):
            return [raw]
        if not isinstance(raw, Iterable):
            return []
        return [str(item) for item in raw if item]

    def user_agent(self) -> str:
        return str(self._lookup("userAgent", "") or "")


class CapabilityProbe:
    """Queries a rendering backend once and caches the resulting snapshot."""

    def __init__(self, backend: RenderingBackend) -> None:
        self._backend = backend
        self._cached: DeviceCapabilities | None = None
        self._lock = threading.Lock()

    @property
    def cached(self) -> DeviceCapabilities | None:
        with self._lock:
            return self._cached

    def probe(self, *, force: bool = False) -> DeviceCapabilities:
        """Return the device capabilities, probing only on first use or when forced.

        Raises ``UnsupportedRenderingError`` when not even a basic rendering
        context is available.
        """
        with self._lock:
            if self._cached is not None and not force:
                return self._cached

            backend = self._backend
            if not backend.supports_context(advanced=False):
                logger.warning("No compatible rendering context; falling back to 2D view")
                msg = "No compatible rendering context could be created"
                raise UnsupportedRenderingError(msg)

            parameters = {
                name: max(0, _safe_int(backend.get_parameter(name))) for name in PARAMETER_NAMES
            }
            user_agent = backend.user_agent()
            capabilities = DeviceCapabilities(
                supports_basic_rendering=True,
                supports_advanced_rendering=bool(backend.supports_context(advanced=True)),
                max_texture_size=parameters["maxTextureSize"],
                max_renderbuffer_size=parameters["maxRenderbufferSize"],
                max_vertex_uniforms=parameters["maxVertexUniforms"],
                max_fragment_uniforms=parameters["maxFragmentUniforms"],
                supported_extensions=frozenset(backend.get_extensions()),
                is_mobile=is_mobile_user_agent(user_agent),
                user_agent=user_agent,
            )
            logger.info(
                "Rendering capabilities detected: max_texture=%d renderbuffer=%d "
                "extensions=%d mobile=%s",
                capabilities.max_texture_size,
                capabilities.max_renderbuffer_size,
                len(capabilities.supported_extensions),
                capabilities.is_mobile,
            )
            self._cached = capabilities
            return capabilities


def probe_host_metrics(metrics: Mapping[str, object]) -> DeviceCapabilities:
    return CapabilityProbe(HostMetricsBackend(metrics)).probe()


__all__ = [
    "MOBILE_USER_AGENT_PATTERN",
    "DeviceCapabilities",
    "RenderingBackend",
    "HostMetricsBackend",
    "CapabilityProbe",
    "is_mobile_user_agent",
    "probe_host_metrics",
]
