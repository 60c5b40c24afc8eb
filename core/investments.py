"""
core.investments
Investment categories and the tech-rank rule.

Kept in core so balancing lives in one place, but UI can still display labels.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Mapping


@dataclass(frozen=True)
class InvestmentSpec:
    key: str
    label: str
    good: bool
    desc: str


DEFAULT_INVESTMENTS: Dict[str, InvestmentSpec] = {
    "green_tech": InvestmentSpec(
        key="green_tech",
        label="Grønn teknologi",
        good=True,
        desc="Domestic clean-tech industry; builds capacity to retire fields faster.",
    ),
    "ai_research": InvestmentSpec(
        key="ai_research",
        label="AI-forskning",
        good=True,
        desc="Research clusters that can absorb offshore engineering talent.",
    ),
    "renewable_energy": InvestmentSpec(
        key="renewable_energy",
        label="Fornybar energi",
        good=True,
        desc="Onshore renewables replacing export revenue over time.",
    ),
    "carbon_capture": InvestmentSpec(
        key="carbon_capture",
        label="Karbonfangst",
        good=True,
        desc="CCS on the shelf, reusing depleted reservoirs.",
    ),
    "hydrogen_tech": InvestmentSpec(
        key="hydrogen_tech",
        label="Hydrogenteknologi",
        good=True,
        desc="Blue/green hydrogen value chains.",
    ),
    "quantum_computing": InvestmentSpec(
        key="quantum_computing",
        label="Kvantedatabehandling",
        good=True,
        desc="Long-horizon research bet.",
    ),
    "battery_tech": InvestmentSpec(
        key="battery_tech",
        label="Batteriteknologi",
        good=True,
        desc="Battery cell and materials production.",
    ),
    "offshore_wind": InvestmentSpec(
        key="offshore_wind",
        label="Havvind",
        good=True,
        desc="Floating wind reusing offshore supply chains.",
    ),
    "foreign_cloud": InvestmentSpec(
        key="foreign_cloud",
        label="Utenlandsk sky",
        good=False,
        desc="Buying capacity abroad instead of building it at home.",
    ),
    "fossil_subsidies": InvestmentSpec(
        key="fossil_subsidies",
        label="Fossile subsidier",
        good=False,
        desc="Keeps old structures alive.",
    ),
    "crypto_mining": InvestmentSpec(
        key="crypto_mining",
        label="Kryptomining",
        good=False,
        desc="Burns cheap power for little lasting value.",
    ),
    "fast_fashion": InvestmentSpec(
        key="fast_fashion",
        label="Fast fashion",
        good=False,
        desc="Short-term consumption, no transition value.",
    ),
}

INVESTMENT_TYPES = tuple(DEFAULT_INVESTMENTS.keys())
GOOD_INVESTMENTS = tuple(k for k, v in DEFAULT_INVESTMENTS.items() if v.good)
BAD_INVESTMENTS = tuple(k for k, v in DEFAULT_INVESTMENTS.items() if not v.good)


def total_good(investments: Mapping[str, float]) -> float:
    return float(sum(float(investments.get(k, 0.0)) for k in GOOD_INVESTMENTS))


def total_bad(investments: Mapping[str, float]) -> float:
    return float(sum(float(investments.get(k, 0.0)) for k in BAD_INVESTMENTS))


def tech_rank(investments: Mapping[str, float]) -> float:
    """(good - bad) / 10, clamped to [0, 100]."""
    raw = (total_good(investments) - total_bad(investments)) / 10.0
    if not math.isfinite(raw):
        return 0.0
    return max(0.0, min(100.0, raw))
