# -*- coding: utf-8 -*-
"""
This module contains the UI components for the Streamlit application.
"""
import logging
from typing import List, Optional

import streamlit as st

from chart_loader import ChartLoader, ChartState
from config import (
    CHART_CONFIG,
    DATA_BASE_URL,
    FETCH_TIMEOUT_SECONDS,
    LOGO_RESOURCE,
    TAB_CONFIG,
)
from data_loader import resource_exists, resource_location
from selection import SelectionCoordinator

logger = logging.getLogger(__name__)

REGION_SELECT_KEY = "region_select"
ACTIVE_TAB_KEY = "active_tab"
TABS_BY_ID = {tab.id: tab for tab in TAB_CONFIG}


def setup_page_config():
    """Sets the Streamlit page configuration."""
    st.set_page_config(
        page_title="Conservancy Analytics",
        page_icon="🌍",
        layout="wide",
    )


@st.cache_data(show_spinner=False)
def logo_location(base: str = DATA_BASE_URL) -> Optional[str]:
    """Where the logo is served from, or None when it is missing."""
    if not resource_exists(LOGO_RESOURCE, base):
        logger.info("Logo not found under %s; skipping.", base)
        return None
    return resource_location(LOGO_RESOURCE, base)


def _display_logo():
    logo = logo_location()
    if logo is not None:
        st.image(logo, width=72)


def _on_region_selected(coordinator: SelectionCoordinator):
    coordinator.select(st.session_state[REGION_SELECT_KEY])


def display_header(region_names: List[str], coordinator: SelectionCoordinator):
    """
    Renders the title block: logo, title and the region dropdown.

    The dropdown mirrors the coordinator, so a selection made by clicking the
    map shows up here on the next run.
    """
    options = [""] + region_names
    st.session_state[REGION_SELECT_KEY] = (
        coordinator.selected_name if coordinator.selected_name in options else ""
    )

    logo_col, title_col, select_col = st.columns([1, 6, 4], vertical_alignment="center")
    with logo_col:
        _display_logo()
    with title_col:
        st.title("Conservancy Analytics")
    with select_col:
        st.selectbox(
            "Conservancy",
            options=options,
            format_func=lambda name: name or "-- Select conservancy --",
            key=REGION_SELECT_KEY,
            on_change=_on_region_selected,
            args=(coordinator,),
            label_visibility="collapsed",
            disabled=not region_names,
        )


def _close_panel(coordinator: SelectionCoordinator, loader: ChartLoader):
    coordinator.clear()
    loader.reset()
    st.session_state[ACTIVE_TAB_KEY] = TAB_CONFIG[0].id


def _render_chart_state(state: ChartState):
    if state.loading:
        st.markdown(f"<p style='text-align:center'>Loading {state.tab.id.upper()} data...</p>", unsafe_allow_html=True)
    elif state.error or state.figure is None:
        st.error(f"Data not found.  \nMissing file for {state.tab.label}")
    else:
        st.plotly_chart(state.figure, use_container_width=True, config=CHART_CONFIG)


def display_side_panel(coordinator: SelectionCoordinator, loader: ChartLoader):
    """
    Renders the analytics panel for the selected region.

    Args:
        coordinator (SelectionCoordinator): Owner of the current selection.
        loader (ChartLoader): Fetches the chart for the active tab.
    """
    region = coordinator.selected_name

    header_col, close_col = st.columns([8, 1], vertical_alignment="center")
    with header_col:
        st.subheader(f"{region} Analytics")
    with close_col:
        st.button("✖", key="close_panel", on_click=_close_panel, args=(coordinator, loader), help="Close")

    if ACTIVE_TAB_KEY not in st.session_state:
        st.session_state[ACTIVE_TAB_KEY] = TAB_CONFIG[0].id
    tab_id = st.radio(
        "Analytic",
        options=[tab.id for tab in TAB_CONFIG],
        format_func=lambda tab_id: TABS_BY_ID[tab_id].label,
        key=ACTIVE_TAB_KEY,
        horizontal=True,
        label_visibility="collapsed",
    )

    placeholder = st.empty()
    state = loader.request(region, TABS_BY_ID[tab_id])
    if state.loading:
        with placeholder.container():
            _render_chart_state(state)
        state = loader.wait(timeout=FETCH_TIMEOUT_SECONDS)
    with placeholder.container():
        _render_chart_state(state)
