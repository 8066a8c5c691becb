"""
Growth Stage Tables
===================
Static stage sequences per crop type plus the yield and quality constants
used by crop predictions. Crop types not listed fall back to corn.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Dict, List

from app.domain.crops import GrowthStage
from app.enums.crops import WeatherSensitivity

HIGH = WeatherSensitivity.HIGH
MEDIUM = WeatherSensitivity.MEDIUM

DEFAULT_GROWTH_STAGES: Dict[str, List[GrowthStage]] = {
    "corn": [
        GrowthStage(
            id="emergence",
            name="Emergence (VE)",
            description="Seedling emergence from soil surface",
            expected_duration=7,
            characteristics=["Coleoptile visible", "First leaves unfurling"],
            critical_factors=["Soil temperature", "Moisture", "Planting depth"],
            recommended_actions=["Monitor emergence rate", "Check for pests", "Ensure adequate moisture"],
            weather_sensitivity=HIGH,
        ),
        GrowthStage(
            id="vegetative",
            name="Vegetative Growth (V1-V18)",
            description="Leaf development and plant establishment",
            expected_duration=50,
            characteristics=["Leaf collar development", "Root establishment", "Stalk elongation"],
            critical_factors=["Nitrogen availability", "Water stress", "Temperature"],
            recommended_actions=["Monitor growth rate", "Apply fertilizer", "Scout for pests"],
            weather_sensitivity=MEDIUM,
        ),
        GrowthStage(
            id="reproductive",
            name="Reproductive (R1-R6)",
            description="Tasseling, pollination, and grain filling",
            expected_duration=60,
            characteristics=["Tassel emergence", "Silk development", "Kernel formation"],
            critical_factors=["Water stress", "Heat stress", "Pollination success"],
            recommended_actions=["Monitor pollination", "Ensure water availability", "Pest management"],
            weather_sensitivity=HIGH,
        ),
        GrowthStage(
            id="maturity",
            name="Maturity (R6)",
            description="Physiological maturity and harvest readiness",
            expected_duration=30,
            characteristics=["Black layer formation", "Moisture reduction", "Husk drying"],
            critical_factors=["Moisture content", "Weather conditions", "Lodging risk"],
            recommended_actions=["Monitor moisture", "Plan harvest", "Prepare equipment"],
            weather_sensitivity=MEDIUM,
        ),
    ],
    "soybeans": [
        GrowthStage(
            id="emergence",
            name="Emergence (VE)",
            description="Cotyledons emergence above soil surface",
            expected_duration=5,
            characteristics=["Cotyledons unfolded", "Hypocotyl arch"],
            critical_factors=["Soil crusting", "Temperature", "Moisture"],
            recommended_actions=["Monitor emergence", "Check stand count", "Scout for damping-off"],
            weather_sensitivity=HIGH,
        ),
        GrowthStage(
            id="vegetative",
            name="Vegetative (V1-V16)",
            description="Trifoliate leaf development",
            expected_duration=45,
            characteristics=["Trifoliate leaves", "Node development", "Branching"],
            critical_factors=["Nitrogen fixation", "Water availability", "Light interception"],
            recommended_actions=["Monitor growth", "Pest scouting", "Weed management"],
            weather_sensitivity=MEDIUM,
        ),
        GrowthStage(
            id="reproductive",
            name="Reproductive (R1-R8)",
            description="Flowering, pod development, and seed filling",
            expected_duration=55,
            characteristics=["Flowering", "Pod set", "Seed development"],
            critical_factors=["Water stress", "Temperature", "Nutrient availability"],
            recommended_actions=["Monitor pod set", "Disease management", "Water management"],
            weather_sensitivity=HIGH,
        ),
        GrowthStage(
            id="maturity",
            name="Maturity (R8)",
            description="Physiological maturity and harvest readiness",
            expected_duration=20,
            characteristics=["Pod yellowing", "Leaf senescence", "Moisture reduction"],
            critical_factors=["Moisture content", "Shattering risk", "Weather"],
            recommended_actions=["Monitor moisture", "Prepare for harvest", "Equipment check"],
            weather_sensitivity=MEDIUM,
        ),
    ],
    "wheat": [
        GrowthStage(
            id="germination",
            name="Germination",
            description="Seed germination and seedling emergence",
            expected_duration=10,
            characteristics=["Radicle emergence", "Coleoptile growth"],
            critical_factors=["Soil temperature", "Moisture", "Seed depth"],
            recommended_actions=["Monitor emergence", "Check stand establishment"],
            weather_sensitivity=HIGH,
        ),
        GrowthStage(
            id="tillering",
            name="Tillering",
            description="Tiller development and plant establishment",
            expected_duration=90,
            characteristics=["Tiller emergence", "Root development", "Leaf production"],
            critical_factors=["Temperature", "Day length", "Nitrogen"],
            recommended_actions=["Monitor tiller count", "Apply fertilizer", "Disease scouting"],
            weather_sensitivity=MEDIUM,
        ),
        GrowthStage(
            id="stem_elongation",
            name="Stem Elongation",
            description="Rapid stem growth and node development",
            expected_duration=30,
            characteristics=["Internode elongation", "Flag leaf emergence"],
            critical_factors=["Water availability", "Temperature", "Lodging risk"],
            recommended_actions=["Monitor growth rate", "Plant growth regulator application"],
            weather_sensitivity=MEDIUM,
        ),
        GrowthStage(
            id="heading",
            name="Heading and Flowering",
            description="Head emergence and pollination",
            expected_duration=20,
            characteristics=["Head emergence", "Anthesis", "Pollination"],
            critical_factors=["Temperature", "Moisture", "Disease pressure"],
            recommended_actions=["Monitor head health", "Fungicide application", "Weather monitoring"],
            weather_sensitivity=HIGH,
        ),
        GrowthStage(
            id="grain_filling",
            name="Grain Filling",
            description="Kernel development and maturation",
            expected_duration=35,
            characteristics=["Kernel formation", "Starch accumulation", "Moisture reduction"],
            critical_factors=["Temperature", "Water stress", "Disease"],
            recommended_actions=["Monitor kernel development", "Water management"],
            weather_sensitivity=HIGH,
        ),
        GrowthStage(
            id="maturity",
            name="Maturity",
            description="Physiological maturity and harvest readiness",
            expected_duration=15,
            characteristics=["Hard dough stage", "Moisture reduction", "Yellowing"],
            critical_factors=["Moisture content", "Weather conditions"],
            recommended_actions=["Monitor moisture", "Harvest planning"],
            weather_sensitivity=MEDIUM,
        ),
    ],
}

TREATMENT_GUIDELINES = {
    "pesticides": {
        "weather_requirements": {
            "wind_speed": {"max": 10, "unit": "mph"},
            "temperature": {"min": 50, "max": 85, "unit": "F"},
            "humidity": {"min": 40, "max": 90, "unit": "%"},
            "rainfall": {"hours_after": 6, "hours_before": 24},
        },
        "safety_requirements": [
            "Personal protective equipment required",
            "Buffer zones near water sources",
            "Pre-harvest interval compliance",
            "Application rate limits",
            "Drift prevention measures",
        ],
    },
    "fertilizers": {
        "soil_requirements": {
            "temperature": {"min": 50, "unit": "F"},
            "moisture": {"min": 30, "max": 80, "unit": "%"},
            "compaction": "minimal",
        },
        "timing_guidelines": [
            "Based on soil test recommendations",
            "Growth stage appropriate",
            "Weather window suitable",
            "Equipment calibrated",
        ],
    },
}

# Bushels per acre, cotton in pounds per acre
BASE_YIELDS: Dict[str, float] = {"corn": 160, "soybeans": 50, "wheat": 60, "cotton": 800}
DEFAULT_BASE_YIELD = 100.0

YIELD_UNITS: Dict[str, str] = {
    "corn": "bu/acre",
    "soybeans": "bu/acre",
    "wheat": "bu/acre",
    "cotton": "lbs/acre",
}

STAGE_YIELD_MULTIPLIERS: Dict[str, float] = {"reproductive": 0.95, "maturity": 0.9}

QUALITY_CHARACTERISTICS: Dict[str, Dict[str, float]] = {
    "corn": {"moisture_content": 15.5, "test_weight": 56, "protein": 8.5},
    "soybeans": {"protein": 35, "oil": 19, "moisture_content": 13},
    "wheat": {"protein": 12, "test_weight": 60, "moisture_content": 14},
}

CRITICAL_WEATHER_PERIODS: Dict[str, List[str]] = {
    "corn": ["Pollination", "Grain filling"],
    "soybeans": ["Flowering", "Pod filling"],
    "wheat": ["Heading", "Grain filling"],
}


def stages_for(crop_type: str) -> List[GrowthStage]:
    """Stage table for a crop type, falling back to corn."""
    return DEFAULT_GROWTH_STAGES.get(crop_type.strip().lower(), DEFAULT_GROWTH_STAGES["corn"])


def start_stage(template: GrowthStage, start_date: datetime | None) -> GrowthStage:
    """Fresh copy of a table stage starting at ``start_date``."""
    return replace(
        template,
        start_date=start_date,
        completion_percentage=0.0,
        characteristics=list(template.characteristics),
        critical_factors=list(template.critical_factors),
        recommended_actions=list(template.recommended_actions),
    )


def base_yield(crop_type: str) -> float:
    return float(BASE_YIELDS.get(crop_type.strip().lower(), DEFAULT_BASE_YIELD))


def yield_unit(crop_type: str) -> str:
    return YIELD_UNITS.get(crop_type.strip().lower(), "units/acre")
