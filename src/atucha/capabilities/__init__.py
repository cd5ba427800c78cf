from atucha.capabilities.probe import (
    CapabilityProbe,
    DeviceCapabilities,
    HostMetricsBackend,
    RenderingBackend,
    is_mobile_user_agent,
    probe_host_metrics,
)

__all__ = [
    "CapabilityProbe",
    "DeviceCapabilities",
    "HostMetricsBackend",
    "RenderingBackend",
    "is_mobile_user_agent",
    "probe_host_metrics",
]
