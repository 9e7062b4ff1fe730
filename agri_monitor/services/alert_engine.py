"""
Alert Rule Engine - threshold checks over a single sensor reading

Rules run in a fixed order and each one fires at most once per reading.
A rule only looks at its inputs when they were reported (not None).
Rules that need the previous reading get it passed in; the engine keeps
no state between calls.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from agri_monitor.core.config import RuleMode, Settings
from agri_monitor.models.alert import Alert

# Thresholds
TEMP_HIGH = 45.0  # Celsius
TEMP_LOW = 5.0
SOIL_MOISTURE_LOW = 20.0  # %
PH_MIN = 5.5
PH_MAX = 8.5
EROSION_SOIL_MOISTURE = 70.0  # %
EROSION_RAINFALL = 50.0  # mm
TILT_DELTA = 5.0  # degrees

TILT_AXES = ("tilt_x", "tilt_y")

# A check returns (title, message) when the rule fires
Check = Callable[[Any, Any | None], tuple[str, str] | None]


def format_value(value: float) -> str:
    """Render a measurement the way devices send it (46.0 -> "46")."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class AlertDraft:
    """Alert produced by a rule, not yet bound to a stored reading."""

    rule: str
    type: str
    severity: str
    title: str
    message: str
    persist: bool = True

    def to_model(self, community_id: str, sensor_data_id: str | None) -> Alert:
        return Alert(
            community_id=community_id,
            type=self.type,
            severity=self.severity,
            title=self.title,
            message=self.message,
            sensor_data_id=sensor_data_id,
            is_active=True,
            resolved_at=None,
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "rule": self.rule,
            "type": self.type,
            "severity": self.severity,
            "title": self.title,
            "message": self.message,
        }


@dataclass(frozen=True)
class Rule:
    name: str
    type: str
    severity: str
    check: Check
    mode: RuleMode = "persist"
    # Columns compared against the previous reading; empty for stateless rules
    previous_fields: tuple[str, ...] = ()


# ==================== CHECKS ====================

def _high_temperature(reading, previous):
    temp = reading.temperature
    if temp is not None and temp > TEMP_HIGH:
        return (
            "High Temperature Alert",
            f"Extreme temperature detected: {format_value(temp)}°C. "
            "Take immediate action to protect crops.",
        )
    return None


def _low_temperature(reading, previous):
    temp = reading.temperature
    if temp is not None and temp < TEMP_LOW:
        return (
            "Low Temperature Alert",
            f"Freezing temperature detected: {format_value(temp)}°C. "
            "Protect sensitive crops from frost damage.",
        )
    return None


def _low_soil_moisture(reading, previous):
    soil = reading.soil_moisture
    if soil is not None and soil < SOIL_MOISTURE_LOW:
        return (
            "Low Soil Moisture",
            f"Soil moisture is critically low: {format_value(soil)}%. Consider irrigation.",
        )
    return None


def _soil_ph(reading, previous):
    ph = reading.ph
    if ph is not None and (ph < PH_MIN or ph > PH_MAX):
        return (
            "Soil pH Alert",
            f"Soil pH is outside optimal range: {format_value(ph)}. Consider soil treatment.",
        )
    return None


def _erosion_risk(reading, previous):
    soil = reading.soil_moisture
    rain = reading.rainfall
    if soil is None or rain is None:
        return None
    if soil > EROSION_SOIL_MOISTURE and rain > EROSION_RAINFALL:
        return (
            "Soil Erosion Risk",
            f"High soil moisture ({format_value(soil)}%) and rainfall ({format_value(rain)}mm) "
            "detected. Possible soil erosion risk.",
        )
    return None


def _tilt_change(reading, previous):
    # previous is the newest earlier reading that reported a tilt axis
    if previous is None:
        return None

    deltas = []
    for axis in TILT_AXES:
        current_value = getattr(reading, axis)
        previous_value = getattr(previous, axis)
        if current_value is not None and previous_value is not None:
            deltas.append(abs(current_value - previous_value))

    if not deltas or max(deltas) <= TILT_DELTA:
        return None

    delta = round(max(deltas), 2)
    return (
        "Landslide Risk",
        f"Tilt sensor changed by {format_value(delta)}° since the previous reading. "
        "Possible landslide risk detected.",
    )


def default_rules(erosion_mode: RuleMode = "advisory", tilt_mode: RuleMode = "advisory") -> list[Rule]:
    """Built-in rule set in evaluation order."""
    return [
        Rule("high_temperature", "weather", "high", _high_temperature),
        Rule("low_temperature", "weather", "high", _low_temperature),
        Rule("low_soil_moisture", "irrigation", "medium", _low_soil_moisture),
        Rule("soil_ph", "soil", "medium", _soil_ph),
        Rule("erosion_risk", "soil", "high", _erosion_risk, mode=erosion_mode),
        Rule("tilt_change", "other", "high", _tilt_change, mode=tilt_mode, previous_fields=TILT_AXES),
    ]


# ==================== ENGINE ====================

class AlertRuleEngine:
    """Evaluates an ordered rule set against one reading."""

    def __init__(self, rules: Sequence[Rule] | None = None):
        self.rules = [rule for rule in (rules if rules is not None else default_rules()) if rule.mode != "off"]

    @classmethod
    def from_settings(cls, settings: Settings) -> "AlertRuleEngine":
        return cls(default_rules(settings.erosion_rule_mode, settings.tilt_rule_mode))

    @property
    def previous_reading_fields(self) -> tuple[str, ...]:
        """Columns the previous reading must report at least one of."""
        fields: list[str] = []
        for rule in self.rules:
            fields.extend(f for f in rule.previous_fields if f not in fields)
        return tuple(fields)

    @property
    def needs_previous_reading(self) -> bool:
        return bool(self.previous_reading_fields)

    def evaluate(self, reading, previous=None) -> list[AlertDraft]:
        """
        Run every enabled rule against the reading.

        Args:
            reading: object exposing the SensorData measurement attributes
            previous: the community's reading before this one, if any

        Returns:
            Drafts in rule order; persist=False marks advisory results
        """
        drafts: list[AlertDraft] = []
        for rule in self.rules:
            fired = rule.check(reading, previous)
            if fired is None:
                continue
            title, message = fired
            drafts.append(
                AlertDraft(
                    rule=rule.name,
                    type=rule.type,
                    severity=rule.severity,
                    title=title,
                    message=message,
                    persist=rule.mode == "persist",
                )
            )
        return drafts
