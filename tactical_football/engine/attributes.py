"""
Attribute evaluator.

Turns a raw attribute into the value a player can actually deliver right now,
given fatigue and the pressure applied by opponents.
"""

from .player import AttributeCategory, Player

FATIGUE_THRESHOLD = 50.0
TECHNICAL_PRESSURE_WEIGHT = 0.5


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def fatigue_penalty(condition: float) -> float:
    """Multiplier applied once condition drops below 50."""
    if condition >= FATIGUE_THRESHOLD:
        return 1.0
    return 0.5 + _clamp(condition, 0.0, 100.0) / 100.0


def effective(player: Player,
              category: AttributeCategory,
              attribute: str,
              pressure: float = 0.0) -> float:
    """
    Effective value of one attribute.

    Every category is scaled by the fatigue penalty; technical attributes are
    further reduced by half of the pressure left after the player's composure
    absorbs its share. Out-of-range inputs are clamped, never rejected.

    Args:
        player: Player being evaluated
        category: Attribute category of ``attribute``
        attribute: Attribute name inside the category
        pressure: Defensive pressure, 0 (free) to 100 (closed down)

    Returns:
        float: effective value in [1, 100]
    """
    base = _clamp(float(getattr(player.category(category), attribute)), 0.0, 100.0)
    pressure = _clamp(pressure, 0.0, 100.0)
    mental_resilience = _clamp(player.mental.composure, 0.0, 100.0) / 100.0
    pressure_effect = pressure * (1.0 - mental_resilience)

    value = base * fatigue_penalty(player.condition)
    if category is AttributeCategory.TECHNICAL:
        value -= pressure_effect * TECHNICAL_PRESSURE_WEIGHT

    return _clamp(value, 1.0, 100.0)


def technical(player: Player, attribute: str, pressure: float = 0.0) -> float:
    return effective(player, AttributeCategory.TECHNICAL, attribute, pressure)


def mental(player: Player, attribute: str, pressure: float = 0.0) -> float:
    return effective(player, AttributeCategory.MENTAL, attribute, pressure)


def physical(player: Player, attribute: str, pressure: float = 0.0) -> float:
    return effective(player, AttributeCategory.PHYSICAL, attribute, pressure)
