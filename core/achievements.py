"""
core.achievements
Achievement rules.

Names are stable identifiers; localized display text lives in
ACHIEVEMENT_TITLES_NB. Evaluation is pure: the caller merges the result into
state and keeps the list free of duplicates.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List

from .investments import total_good
from .state import END_YEAR, INITIAL_YEAR, GameState


@dataclass(frozen=True)
class AchievementRule:
    name: str
    condition: Callable[[GameState], bool]


def _share_phased_out(s: GameState) -> float:
    total = len(s.game_fields)
    if total == 0:
        return 0.0
    return s.phased_out_count / total


def _lifetime_emissions_saved_mt(s: GameState) -> float:
    return sum(f.total_lifetime_emissions for f in s.game_fields if f.status == "closed") / 1000.0


ACHIEVEMENT_RULES: List[AchievementRule] = [
    AchievementRule("First Steps", lambda s: any(f.status == "closed" for f in s.game_fields)),
    AchievementRule("Speedrunner", lambda s: s.phased_out_count >= 10 and (s.year - INITIAL_YEAR) <= 5),
    AchievementRule("Under Press", lambda s: _share_phased_out(s) >= 0.5 and (END_YEAR - s.year) <= 5),
    AchievementRule("Climate Aware", lambda s: s.global_temperature <= 1.5 and s.phased_out_count >= 5),
    AchievementRule("Tech Pioneer", lambda s: total_good(s.investments) >= 200),
    AchievementRule("Green Transition", lambda s: s.phased_out_count >= 15),
    AchievementRule(
        "Perfect Timing",
        lambda s: len(s.game_fields) > 0 and s.phased_out_count == len(s.game_fields) and s.year == END_YEAR,
    ),
    AchievementRule("Planet Saver", lambda s: _lifetime_emissions_saved_mt(s) >= 100),
    AchievementRule("Too Late", lambda s: s.year >= END_YEAR and s.phased_out_count < len(s.game_fields) * 0.8),
    AchievementRule("Climate Failure", lambda s: s.global_temperature > 1.8),
]

ACHIEVEMENT_NAMES = tuple(r.name for r in ACHIEVEMENT_RULES)

ACHIEVEMENT_TITLES_NB: Dict[str, str] = {
    "First Steps": "Første Skritt",
    "Speedrunner": "Speedrunner",
    "Under Press": "Under Press",
    "Climate Aware": "Klimabevisst",
    "Tech Pioneer": "Tech-Pioner",
    "Green Transition": "Grønn Omstilling",
    "Perfect Timing": "Perfekt Timing",
    "Planet Saver": "Planet-Redder",
    "Too Late": "For Sent",
    "Climate Failure": "Klimakatastrofe",
}


def evaluate_achievements(state: GameState) -> List[str]:
    """Every rule whose condition holds and that the state does not hold yet, in table order."""
    held = set(state.achievements)
    return [r.name for r in ACHIEVEMENT_RULES if r.name not in held and r.condition(state)]


def display_title(name: str) -> str:
    return ACHIEVEMENT_TITLES_NB.get(name, name)
