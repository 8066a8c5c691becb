"""
Equipment Enumerations
======================
"""

from enum import Enum


class EquipmentCategory(str, Enum):
    TRACTORS = "tractors"
    HARVESTING = "harvesting"
    TILLAGE = "tillage"
    PLANTING = "planting"
    IRRIGATION = "irrigation"
    LIVESTOCK = "livestock"
    TRANSPORT = "transport"
    TOOLS = "tools"
    TECHNOLOGY = "technology"
    BUILDING_SYSTEMS = "building_systems"

    def __str__(self) -> str:
        return self.value


class EquipmentType(str, Enum):
    TRACTOR = "tractor"
    COMBINE_HARVESTER = "combine_harvester"
    PLANTER = "planter"
    SPRAYER = "sprayer"
    PLOW = "plow"
    CULTIVATOR = "cultivator"
    BALER = "baler"
    MOWER = "mower"
    IRRIGATION_PUMP = "irrigation_pump"
    PIVOT = "pivot"
    TRUCK = "truck"
    TRAILER = "trailer"
    DRONE = "drone"
    GENERATOR = "generator"
    OTHER = "other"

    def __str__(self) -> str:
        return self.value


class EquipmentStatus(str, Enum):
    ACTIVE = "active"
    MAINTENANCE = "maintenance"
    REPAIR = "repair"
    RETIRED = "retired"
    SOLD = "sold"

    def __str__(self) -> str:
        return self.value


class MaintenanceType(str, Enum):
    ROUTINE = "routine"
    REPAIR = "repair"
    INSPECTION = "inspection"
    OVERHAUL = "overhaul"
    EMERGENCY = "emergency"

    def __str__(self) -> str:
        return self.value


class InspectionResult(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    NEEDS_ATTENTION = "needs_attention"

    def __str__(self) -> str:
        return self.value
