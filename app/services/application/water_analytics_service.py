"""
Water Analytics Service
=======================

Read-only efficiency figures, zone and system analytics, and maintenance
recommendations derived from irrigation history. Nothing here mutates a zone.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Dict, List, Optional

from app.domain.irrigation import IrrigationEvent, IrrigationZone
from app.enums.irrigation import AlertPriority, AlertType, EventStatus

logger = logging.getLogger(__name__)

MAX_RECOMMENDATIONS = 5


def _water_used(event: IrrigationEvent) -> float:
    return event.water_applied.actual or event.water_applied.planned


class WaterAnalyticsService:
    """Efficiency and analytics over the irrigation service's zones."""

    def __init__(self, *, irrigation_service: Any) -> None:
        self._irrigation = irrigation_service

    # ------------------------------------------------------------------
    # Efficiency
    # ------------------------------------------------------------------

    def calculate_water_efficiency(self, zone_id: str, days: int = 30) -> Dict[str, float]:
        """
        Efficiency of completed irrigation within the last ``days``.

        With no completed events the static ratings of the zone's system are
        returned with zero water and cost. Divisions are guarded, so the
        result never contains NaN.
        """
        zone = self._irrigation.get_zone(zone_id)
        if zone is None:
            return {
                "application_efficiency": 0.0,
                "distribution_uniformity": 0.0,
                "water_use_efficiency": 0.0,
                "total_water_used": 0.0,
                "average_cost_per_inch": 0.0,
            }

        static = zone.irrigation_system.efficiency
        completed = [
            e for e in self._irrigation.get_irrigation_history(zone_id, days) if e.status == EventStatus.COMPLETED
        ]
        if not completed:
            return {
                "application_efficiency": static.application_efficiency,
                "distribution_uniformity": static.distribution_uniformity,
                "water_use_efficiency": static.water_use_efficiency,
                "total_water_used": 0.0,
                "average_cost_per_inch": 0.0,
            }

        planned = sum(e.water_applied.planned for e in completed)
        actual = sum(_water_used(e) for e in completed)
        cost = sum(e.cost.total for e in completed if e.cost)
        uniformity = sum(e.results.uniformity for e in completed if e.results) / len(completed)

        return {
            "application_efficiency": round(actual / planned * 100, 2) if planned > 0 else 0.0,
            "distribution_uniformity": round(uniformity, 2),
            "water_use_efficiency": round(static.water_use_efficiency, 2),
            "total_water_used": round(actual, 2),
            "average_cost_per_inch": round(cost / actual, 2) if actual > 0 else 0.0,
        }

    # ------------------------------------------------------------------
    # Analytics
    # ------------------------------------------------------------------

    @staticmethod
    def _sensor_status(zone: IrrigationZone) -> Dict[str, Dict[str, Any]]:
        status: Dict[str, Dict[str, Any]] = {}
        for sensor in zone.sensors:
            last = sensor.last_reading
            status[sensor.type.value] = {
                "status": sensor.status.value,
                "latest_value": last.value if last else None,
                "last_update": last.timestamp.isoformat() if last else None,
                "battery_level": sensor.battery_level,
            }
        return status

    @staticmethod
    def _alert_summary(alerts) -> Dict[str, Any]:
        return {
            "active": len(alerts),
            "critical": sum(1 for a in alerts if a.priority == AlertPriority.CRITICAL),
            "by_priority": dict(Counter(a.priority.value for a in alerts)),
            "by_type": dict(Counter(a.type.value for a in alerts)),
        }

    def get_zone_analytics(self, zone_id: str) -> Optional[Dict[str, Any]]:
        zone = self._irrigation.get_zone(zone_id)
        if zone is None:
            return None

        efficiency = self.calculate_water_efficiency(zone_id)
        recent = self._irrigation.get_irrigation_history(zone_id, 30)
        active_alerts = self._irrigation.get_alerts(zone_id, active_only=True)

        if recent:
            average_duration = sum(e.actual_duration or e.planned_duration for e in recent) / len(recent)
            success_rate = sum(1 for e in recent if e.results and e.results.success) / len(recent) * 100
        else:
            average_duration = 0.0
            success_rate = 100.0

        return {
            "zone": {**zone.summary(), "soil_type": zone.soil_type},
            "efficiency": efficiency,
            "irrigation": {
                "events_last_30_days": len(recent),
                "total_water_used": efficiency["total_water_used"],
                "average_session_duration": round(average_duration, 2),
                "success_rate": round(success_rate, 2),
            },
            "sensors": self._sensor_status(zone),
            "alerts": self._alert_summary(active_alerts),
            "water_budget": zone.water_budget.to_dict(),
            "recommendations": self.generate_zone_recommendations(zone),
        }

    def get_system_analytics(self) -> Dict[str, Any]:
        zones = self._irrigation.get_all_zones()
        active_alerts = self._irrigation.get_alerts(active_only=True)

        total_water = 0.0
        total_cost = 0.0
        efficiency_sum = 0.0
        rows = []
        for zone in zones:
            efficiency = self.calculate_water_efficiency(zone.id)
            total_water += efficiency["total_water_used"]
            total_cost += efficiency["total_water_used"] * efficiency["average_cost_per_inch"]
            efficiency_sum += efficiency["application_efficiency"]
            rows.append(
                {
                    "id": zone.id,
                    "name": zone.name,
                    "status": zone.status.value,
                    "efficiency": efficiency["application_efficiency"],
                    "alerts": sum(1 for a in active_alerts if a.zone_id == zone.id),
                }
            )

        return {
            "system": {
                "status": self._irrigation.system_status.value,
                "total_zones": len(zones),
                "active_zones": len(self._irrigation.get_active_zones()),
                "currently_irrigating": len(self._irrigation.get_active_irrigation_events()),
            },
            "water": {
                "total_used": round(total_water, 2),
                "total_cost": round(total_cost, 2),
                "average_efficiency": round(efficiency_sum / len(zones), 2) if zones else 0.0,
            },
            "alerts": {
                "total": len(active_alerts),
                "critical": sum(1 for a in active_alerts if a.priority == AlertPriority.CRITICAL),
                "by_type": dict(Counter(a.type.value for a in active_alerts)),
            },
            "zones": rows,
        }

    def generate_zone_recommendations(self, zone: IrrigationZone) -> List[str]:
        recommendations: List[str] = []
        efficiency = self.calculate_water_efficiency(zone.id)
        active_alerts = self._irrigation.get_alerts(zone.id, active_only=True)

        if efficiency["application_efficiency"] < 75:
            recommendations.append("Consider system maintenance to improve application efficiency")
        if efficiency["distribution_uniformity"] < 80:
            recommendations.append("Check sprinkler heads and pressure for uniform distribution")
        if any(a.type == AlertType.SENSOR_OFFLINE for a in active_alerts):
            recommendations.append("Restore offline sensors for better monitoring")
        if zone.water_budget.usage_ratio > 0.8:
            recommendations.append("Monitor water usage closely - approaching budget limit")
        if not self._irrigation.get_irrigation_history(zone.id, 7):
            recommendations.append("Consider setting up automated irrigation schedules")

        return recommendations[:MAX_RECOMMENDATIONS]
