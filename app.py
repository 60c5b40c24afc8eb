"""Phase Out Village (Streamlit)

Principles:
- UI only renders + dispatches actions.
- Core domain, reducer and persistence are pure Python modules.
- The saved game lives in a JSON file store; reloading the page restores it.

Entry point: streamlit run app.py
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Optional

import streamlit as st

from core.achievements import display_title
from core.dataset import load_historical_series
from core.investments import DEFAULT_INVESTMENTS
from core.projections import (
    PROJECTION_END,
    REFERENCE_GAS_PRICE,
    REFERENCE_OIL_PRICE,
    aggregate_yearly,
    extract_emission_intensities,
    project_series,
)
from core.state import GameState
from engine.actions import (
    AdvanceTutorial,
    AdvanceYearManually,
    ClearSelectedFields,
    CloseAchievementModal,
    CloseGameOverModal,
    DeselectFieldFromMulti,
    MakeInvestment,
    PhaseOutField,
    PhaseOutSelectedFields,
    RestartGame,
    SelectFieldForMulti,
    SetViewMode,
    SkipTutorial,
    ToggleMultiSelect,
)
from engine.config import EngineConfig, configure_logging
from engine.game import GameEngine
from engine.runlog import dumps_run_export
from engine.selectors import compute_stats, map_markers
from persistence.storage import GameStorage
from persistence.stores.file import JsonFileStore

APP_TITLE = "Phase Out Village"
APP_SUBTITLE = "Fas ut norske olje- og gassfelt før 2040, uten å gå tom for penger."
APP_VERSION = "1.0.0"

logger = logging.getLogger(__name__)

st.set_page_config(page_title=APP_TITLE, page_icon="🛢️", layout="wide", initial_sidebar_state="expanded")

CSS = """
<style>
.block-container {padding-top: 3.2rem; padding-bottom: 2rem;}
.card {
  border: 1px solid rgba(255,255,255,0.08);
  border-radius: 16px;
  padding: 14px 16px;
  background: rgba(255,255,255,0.03);
}
.pill {
  display: inline-block;
  padding: 2px 10px;
  border-radius: 999px;
  border: 1px solid rgba(255,255,255,0.12);
  font-size: 12px;
  opacity: .85;
}
.small {font-size: 13px; opacity:.75;}
</style>
"""

st.markdown(CSS, unsafe_allow_html=True)

TUTORIAL = [
    "Velkommen! Norge har 15 år på seg til å fase ut olje- og gassfeltene.",
    "Hvert felt har en utfasingskostnad. Budsjettet ditt kan aldri gå under null.",
    "Hver utfasing gir oljeinntekter fra feltene som fortsatt produserer, men også en klimaregning.",
    "Klimaregningen vokser med temperaturen og med hvor nær 2040 du er.",
    "Investeringer i grønn teknologi øker hvor mange felt du kan fase ut samtidig.",
    "Vent ikke for lenge: å hoppe over et år øker temperaturen.",
    "Klarer du 80 % innen 2040, vinner du.",
]


def _config() -> EngineConfig:
    ss = st.session_state
    if "engine_config" not in ss:
        ss.engine_config = EngineConfig.from_env()
        configure_logging(ss.engine_config.log_level)
    return ss.engine_config


def _engine() -> GameEngine:
    ss = st.session_state
    if "engine" not in ss:
        cfg = _config()
        series = load_historical_series(cfg.dataset_path)
        storage = GameStorage(JsonFileStore(cfg.state_path), key=cfg.storage_key, series=series)
        ss.engine = GameEngine.restore(storage, series=series)
        logger.info("Session started at year %s with %d fields", ss.engine.state.year, len(ss.engine.state.game_fields))
    return ss.engine


def dispatch(action: Any) -> None:
    _engine().dispatch(action)
    st.rerun()


def _fmt_bn(x: float) -> str:
    return f"{x:,.0f} mrd".replace(",", " ")


# =========================
# Modals (rendered inline)
# =========================


def render_banners(s: GameState) -> None:
    if s.show_budget_warning and s.budget_warning_message:
        st.warning(s.budget_warning_message)

    if s.show_achievement_modal and s.new_achievements:
        with st.container(border=True):
            st.markdown("### 🏆 Ny prestasjon!")
            for name in s.new_achievements:
                st.markdown(f"- **{display_title(name)}**")
            if st.button("Fortsett", key="close_achievement"):
                dispatch(CloseAchievementModal())

    if s.show_game_over_modal:
        stats = compute_stats(s)
        titles = {"victory": "Seier!", "partial_success": "Delvis suksess", "defeat": "Tap"}
        with st.container(border=True):
            st.markdown(f"## {titles.get(s.game_phase, 'Spillet er over')}")
            st.markdown(
                f"Du faset ut **{stats.fields_phased}/{stats.total_fields}** felt "
                f"({stats.completion_percentage:.0f} %) og unngikk **{stats.emissions_avoided_mt:.1f} Mt CO₂**."
            )
            c1, c2 = st.columns(2)
            with c1:
                if st.button("Lukk", key="close_game_over"):
                    dispatch(CloseGameOverModal())
            with c2:
                if st.button("Nytt spill", key="restart_from_game_over"):
                    dispatch(RestartGame())


def render_tutorial(s: GameState) -> None:
    if s.tutorial_step >= len(TUTORIAL):
        return
    with st.container(border=True):
        st.markdown(f"**Guide {s.tutorial_step + 1}/{len(TUTORIAL)}:** {TUTORIAL[s.tutorial_step]}")
        c1, c2 = st.columns(2)
        with c1:
            if st.button("Neste", key="tutorial_next"):
                dispatch(AdvanceTutorial())
        with c2:
            if st.button("Hopp over", key="tutorial_skip"):
                dispatch(SkipTutorial())


# =========================
# Pages
# =========================


def page_map(s: GameState) -> None:
    st.map(map_markers(s), latitude="lat", longitude="lon", color="color", size=12000)

    st.markdown("### Felt")
    if s.multi_phase_out_mode:
        st.caption(f"Velg opptil {s.yearly_phase_out_capacity} felt og fas dem ut samlet.")
        c1, c2 = st.columns(2)
        with c1:
            if st.button(f"Fas ut valgte ({len(s.selected_fields)})", disabled=not s.selected_fields):
                dispatch(PhaseOutSelectedFields())
        with c2:
            if st.button("Tøm valg"):
                dispatch(ClearSelectedFields())

    for f in sorted(s.game_fields, key=lambda f: (f.status != "active", -f.total_lifetime_emissions)):
        cols = st.columns([3, 2, 2, 2, 2])
        cols[0].markdown(f"**{f.name}** <span class='pill'>{f.status}</span>", unsafe_allow_html=True)
        cols[1].markdown(f"<span class='small'>Kostnad {_fmt_bn(f.phase_out_cost)}</span>", unsafe_allow_html=True)
        cols[2].markdown(f"<span class='small'>{f.emissions[0]:.2f} Mt/år</span>", unsafe_allow_html=True)
        cols[3].markdown(f"<span class='small'>{f.intensity:.1f} kg/boe</span>", unsafe_allow_html=True)
        if not f.is_active:
            continue
        if s.multi_phase_out_mode:
            picked = f.name in s.selected_fields
            if cols[4].button("Fjern" if picked else "Velg", key=f"pick_{f.name}"):
                dispatch(DeselectFieldFromMulti(field_name=f.name) if picked else SelectFieldForMulti(field_name=f.name))
        elif cols[4].button("Fas ut", key=f"phase_{f.name}", disabled=s.budget < f.phase_out_cost):
            dispatch(PhaseOutField(field_name=f.name))


def page_investments(s: GameState) -> None:
    st.markdown("### Investeringer")
    amount = st.number_input("Beløp (mrd NOK)", min_value=1.0, value=50.0, step=10.0)
    for spec in DEFAULT_INVESTMENTS.values():
        cols = st.columns([3, 4, 2])
        cols[0].markdown(f"**{spec.label}** {'🌱' if spec.good else '⚠️'}")
        cols[1].markdown(f"<span class='small'>{spec.desc} · investert {_fmt_bn(s.investments.get(spec.key, 0.0))}</span>", unsafe_allow_html=True)
        if cols[2].button("Invester", key=f"invest_{spec.key}", disabled=s.budget < amount):
            dispatch(MakeInvestment(investment=spec.key, amount=float(amount)))


def page_stats(s: GameState) -> None:
    stats = compute_stats(s)
    c = st.columns(4)
    c[0].metric("Faset ut", f"{stats.fields_phased}/{stats.total_fields}", f"{stats.completion_percentage:.0f} %")
    c[1].metric("Unngått CO₂", f"{stats.emissions_avoided_mt:.1f} Mt")
    c[2].metric("Brukt", _fmt_bn(stats.total_budget_spent))
    c[3].metric("Snittintensitet", f"{stats.average_intensity:.1f} kg/boe")

    series = project_series(_engine().series or load_historical_series())
    rows = aggregate_yearly(series, REFERENCE_OIL_PRICE, REFERENCE_GAS_PRICE, s.shutdowns)
    st.markdown("### Årlige inntekter og utslipp (med dine nedstengninger)")
    st.line_chart({"år": [r.year for r in rows], "inntekt": [r.income for r in rows]}, x="år", y="inntekt")
    st.line_chart({"år": [r.year for r in rows], "utslipp": [r.emission for r in rows]}, x="år", y="utslipp")

    points = [p for p in extract_emission_intensities(series) if p.year == min(s.year, PROJECTION_END)]
    if points:
        st.markdown(f"### Utslippsintensitet mot produksjon ({points[0].year})")
        st.scatter_chart(
            {
                "produksjon": [p.total_production for p in points],
                "intensitet": [p.emission_intensity for p in points],
                "felt": [p.field_name for p in points],
            },
            x="produksjon",
            y="intensitet",
            color="felt",
        )

    if s.player_choices:
        st.markdown("### Valg")
        for line in reversed(s.player_choices[-20:]):
            st.markdown(f"- {line}")


def page_debug(s: GameState) -> None:
    st.subheader("EngineConfig")
    st.json(asdict(_config()))
    st.subheader("Run log")
    st.download_button(
        "Last ned run-logg",
        data=dumps_run_export(_engine().export_run(asdict(_config()))).encode("utf-8"),
        file_name="phase_out_village_run.json",
        mime="application/json",
    )
    st.subheader("GameState")
    st.json({k: v for k, v in asdict(s).items() if k != "game_fields"})


VIEW_PAGES = {
    "map": ("Kart", page_map),
    "investments": ("Investeringer", page_investments),
    "stats": ("Statistikk", page_stats),
}


# =========================
# Sidebar
# =========================


def sidebar(s: GameState) -> Optional[str]:
    st.sidebar.markdown(f"**{APP_TITLE}**  ")
    st.sidebar.markdown(f"v{APP_VERSION}")
    st.sidebar.markdown("---")

    st.sidebar.metric("År", s.year)
    st.sidebar.metric("Budsjett", _fmt_bn(s.budget))
    st.sidebar.metric("Temperatur", f"{s.global_temperature:.2f} °C")
    st.sidebar.metric("Poeng", s.score)
    st.sidebar.caption(f"Kapasitet {s.yearly_phase_out_capacity} felt · tech-rang {s.norway_tech_rank:.0f}")

    st.sidebar.markdown("---")
    if st.sidebar.button("Multi-utfasing: " + ("på" if s.multi_phase_out_mode else "av"), use_container_width=True):
        dispatch(ToggleMultiSelect())
    if st.sidebar.button("Neste år", disabled=s.is_over, use_container_width=True):
        dispatch(AdvanceYearManually())
    if st.sidebar.button("Start på nytt", use_container_width=True):
        dispatch(RestartGame())

    st.sidebar.markdown("---")
    keys = list(VIEW_PAGES)
    current = s.current_view if s.current_view in VIEW_PAGES else "map"
    picked = st.sidebar.radio("Side", keys, index=keys.index(current), format_func=lambda k: VIEW_PAGES[k][0])
    if picked != s.current_view:
        dispatch(SetViewMode(view=picked))

    if s.achievements:
        st.sidebar.markdown("---")
        st.sidebar.markdown("### Prestasjoner")
        for name in s.achievements:
            st.sidebar.markdown(f"- {display_title(name)}")

    show_debug = st.sidebar.checkbox("Debug", value=False)
    return "debug" if show_debug else None


# =========================
# Main
# =========================


def main() -> None:
    s = _engine().state
    extra = sidebar(s)

    st.title(APP_TITLE)
    st.caption(APP_SUBTITLE)

    render_tutorial(s)
    render_banners(s)

    if extra == "debug":
        page_debug(s)
        return

    _, page = VIEW_PAGES.get(s.current_view, VIEW_PAGES["map"])
    page(s)


if __name__ == "__main__":
    main()
