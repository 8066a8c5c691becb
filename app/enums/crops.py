"""
Crop Enumerations
=================
"""

from enum import Enum


class CropStatus(str, Enum):
    """planned -> planted -> growing -> harvested | failed"""

    PLANNED = "planned"
    PLANTED = "planted"
    GROWING = "growing"
    HARVESTED = "harvested"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


class WeatherSensitivity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    def __str__(self) -> str:
        return self.value


class TreatmentType(str, Enum):
    FERTILIZER = "fertilizer"
    PESTICIDE = "pesticide"
    HERBICIDE = "herbicide"
    FUNGICIDE = "fungicide"
    IRRIGATION = "irrigation"
    OTHER = "other"

    def __str__(self) -> str:
        return self.value


class PestType(str, Enum):
    INSECT = "insect"
    DISEASE = "disease"
    WEED = "weed"
    OTHER = "other"

    def __str__(self) -> str:
        return self.value


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    def __str__(self) -> str:
        return self.value


class NotificationType(str, Enum):
    STAGE_CHANGE = "stage_change"
    TREATMENT_DUE = "treatment_due"
    PEST_ALERT = "pest_alert"
    WEATHER_WARNING = "weather_warning"
    HARVEST_READY = "harvest_ready"
    MAINTENANCE = "maintenance"

    def __str__(self) -> str:
        return self.value


class NotificationPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    def __str__(self) -> str:
        return self.value
