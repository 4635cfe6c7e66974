"""
milestones.py — Streak tiers and celebration messages.
Maps a streak length to an emoji and a motivational line, with a distinct
message on the exact milestone days (3, 7, 14, 21, 30, 60, 90).
"""

from dataclasses import dataclass
from enum import Enum

from config import APP_LANGUAGE

MILESTONES = (3, 7, 14, 21, 30, 60, 90)


class Tier(str, Enum):
    STARTING = "starting"
    SPROUTING = "sprouting"
    FULL_WEEK = "full_week"
    ON_A_ROLL = "on_a_roll"
    HABIT_FORMED = "habit_formed"
    FULL_MONTH = "full_month"
    IMPRESSIVE = "impressive"
    UNSTOPPABLE = "unstoppable"


@dataclass(frozen=True)
class Milestone:
    tier: Tier
    emoji: str
    message_es: str
    message_en: str
    is_milestone: bool = False

    def message(self, language: str = APP_LANGUAGE) -> str:
        return self.message_en if language == "en" else self.message_es


# threshold, tier, emoji, generic es, generic en  (highest first)
_TIERS = [
    (90, Tier.UNSTOPPABLE, "👑", "¡{n} días! ¡Legendario!", "{n} days! Legendary!"),
    (60, Tier.IMPRESSIVE, "⭐", "¡{n} días seguidos!", "{n} days in a row!"),
    (30, Tier.FULL_MONTH, "🎖️", "¡{n} días! ¡Sigue así!", "{n} days! Keep it up!"),
    (21, Tier.HABIT_FORMED, "🏆", "¡{n} días! ¡Hábito formado!", "{n} days! Habit formed!"),
    (14, Tier.ON_A_ROLL, "💪", "¡{n} días! ¡Estás en racha!", "{n} days! You're on a roll!"),
    (7, Tier.FULL_WEEK, "🔥", "¡Racha de {n} días!", "{n} day streak!"),
    (3, Tier.SPROUTING, "🌱", "{n} días seguidos", "{n} days in a row"),
]

_MILESTONE_MESSAGES = {
    3: ("¡3 días! El hábito está germinando", "3 days! The habit is sprouting"),
    7: ("¡7 días! ¡Una semana completa!", "7 days! A full week!"),
    14: ("¡14 días! Estás en racha", "14 days! You're on fire"),
    21: ("¡21 días! ¡Ya es un HÁBITO!", "21 days! It's a HABIT now!"),
    30: ("¡30 días! ¡Un mes completo!", "30 days! A full month!"),
    60: ("¡60 días! ¡Impresionante!", "60 days! Impressive!"),
    90: ("¡90 días! ¡Eres imparable!", "90 days! You're unstoppable!"),
}


def classify(streak: int) -> Milestone | None:
    """Tier for a streak length, or None below 3 days."""
    for threshold, tier, emoji, generic_es, generic_en in _TIERS:
        if streak < threshold:
            continue
        if streak in _MILESTONE_MESSAGES:
            message_es, message_en = _MILESTONE_MESSAGES[streak]
            return Milestone(tier, emoji, message_es, message_en, is_milestone=True)
        return Milestone(tier, emoji, generic_es.format(n=streak), generic_en.format(n=streak))
    return None


def is_milestone(streak: int) -> bool:
    return streak in MILESTONES


def celebrate(streak: int) -> Milestone:
    """Celebration shown right after a completion; always returns something."""
    milestone = classify(streak)
    if milestone:
        return milestone
    if streak >= 1:
        return Milestone(Tier.STARTING, "✨", f"¡Día {streak}! ¡Buen comienzo!", f"Day {streak}! Great start!")
    return Milestone(Tier.STARTING, "✅", "Intención completada", "Intention completed")
