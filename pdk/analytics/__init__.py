"""Usage analytics.

Every command conclusion (normal run, help, usage error) sends one anonymous
screenview hit. Delivery is best-effort: a hit that is slow or fails never
changes a command's output or exit code, and delays it by at most
FLUSH_DURATION.

Opt out with `disabled: true` in the analytics config file or by setting
PDK_DISABLE_ANALYTICS.
"""
from pdk.analytics.barrier import (
    EXEMPT_COMMANDS, Invocation, NotificationHandle, TelemetryBarrier,
)
from pdk.analytics.client import FLUSH_DURATION, Client
from pdk.analytics.config import AnalyticsConfig, load_config
from pdk.analytics.registration import ensure_registration

__all__ = [
    "EXEMPT_COMMANDS", "FLUSH_DURATION", "AnalyticsConfig", "Client",
    "Invocation", "NotificationHandle", "TelemetryBarrier",
    "ensure_registration", "load_config",
]
