from __future__ import annotations

from typing import Mapping

from ..schemas import HardwareComponent, HealthLevel, HealthStatus, MaintenanceAlert

MONITOR_THRESHOLD_PCT = 60.0
REPLACE_THRESHOLD_PCT = 85.0


def classify_health(component: HardwareComponent, *, name: str | None = None) -> HealthStatus:
    """
    Wear classification from firing count against rated life.

    Excellent below 60% of rated life, Monitor below 85%, Replace Soon from 85% on.
    A non-positive rated life is a configuration error and raises ValueError.
    """
    if component.max_life <= 0:
        label = name or "component"
        raise ValueError(f"{label}: max_life must be a positive number of firings, got {component.max_life}")

    usage = component.firing_count / component.max_life * 100

    if usage < MONITOR_THRESHOLD_PCT:
        status = HealthLevel.excellent
    elif usage < REPLACE_THRESHOLD_PCT:
        status = HealthLevel.monitor
    else:
        status = HealthLevel.replace_soon

    return HealthStatus(
        component=name,
        status=status,
        usage_percent=usage,
        display_percent=min(usage, 100.0),
    )


def maintenance_alerts(hardware: Mapping[str, HardwareComponent]) -> list[MaintenanceAlert]:
    alerts: list[MaintenanceAlert] = []
    for name, component in hardware.items():
        health = classify_health(component, name=name)
        if health.status == HealthLevel.monitor:
            alerts.append(
                MaintenanceAlert(
                    component=name,
                    level="monitor",
                    message="Monitor closely",
                    usage_percent=health.usage_percent,
                )
            )
        elif health.status == HealthLevel.replace_soon:
            alerts.append(
                MaintenanceAlert(
                    component=name,
                    level="replace",
                    message="Replacement recommended soon",
                    usage_percent=health.usage_percent,
                )
            )
    return alerts
