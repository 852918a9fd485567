"""pyfirealarm - Async state-reconciliation and alerting engine for gas sensor telemetry."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyfirealarm")
except PackageNotFoundError:
    __version__ = "0+local"
from pyfirealarm.config import DashboardConfig
from pyfirealarm.dashboard import FireAlarmDashboard
from pyfirealarm.exceptions import (
    FireAlarmConfigError,
    FireAlarmError,
    FireAlarmTransportError,
    MalformedPayloadError,
)
from pyfirealarm.ingestion.reconcile import TelemetryReconciler
from pyfirealarm.models import (
    AlertView,
    DashboardView,
    Device,
    DeviceView,
    GasState,
    HeaderView,
    HubReading,
    HubStatus,
    RenderReason,
    RenderUpdate,
    UnitReading,
)
from pyfirealarm.render import project
from pyfirealarm.state.policy import classify
from pyfirealarm.state.store import DeviceStore
from pyfirealarm.ticker import StalenessTicker

__all__ = [
    "__version__",
    "AlertView",
    "DashboardConfig",
    "DashboardView",
    "Device",
    "DeviceStore",
    "DeviceView",
    "FireAlarmConfigError",
    "FireAlarmDashboard",
    "FireAlarmError",
    "FireAlarmTransportError",
    "GasState",
    "HeaderView",
    "HubReading",
    "HubStatus",
    "MalformedPayloadError",
    "RenderReason",
    "RenderUpdate",
    "StalenessTicker",
    "TelemetryReconciler",
    "UnitReading",
    "classify",
    "project",
]
