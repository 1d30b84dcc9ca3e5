# -*- coding: utf-8 -*-
import logging
from concurrent.futures import ThreadPoolExecutor

import streamlit as st

# --- Custom Modules ---
from chart_loader import ChartLoader
from config import LOG_LEVEL
from data_loader import RegionCollection, get_region_collection
from map_view import create_interactive_map
from selection import SelectionCoordinator
from ui import setup_page_config, display_header, display_side_panel

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@st.cache_resource(show_spinner=False)
def get_fetch_executor() -> ThreadPoolExecutor:
    """Worker pool shared by every session's chart loader."""
    return ThreadPoolExecutor(max_workers=4, thread_name_prefix="chart-fetch")


def get_session_state(collection: RegionCollection):
    """Per-session selection coordinator and chart loader."""
    if "coordinator" not in st.session_state:
        st.session_state.coordinator = SelectionCoordinator(collection.registry)
    if "chart_loader" not in st.session_state:
        st.session_state.chart_loader = ChartLoader(executor=get_fetch_executor())
    return st.session_state.coordinator, st.session_state.chart_loader


def main() -> None:
    """Main function to run the Streamlit application."""
    setup_page_config()

    collection = get_region_collection()
    coordinator, loader = get_session_state(collection)

    display_header(collection.names, coordinator)
    if collection.is_empty:
        st.info("No conservancy boundaries are available right now.")

    if coordinator.has_selection:
        map_col, panel_col = st.columns([3, 2])
    else:
        map_col, panel_col = st.container(), None

    with map_col:
        clicked = create_interactive_map(collection, coordinator)

    if clicked and coordinator.select(clicked):
        st.rerun()

    if panel_col is not None:
        with panel_col:
            display_side_panel(coordinator, loader)


if __name__ == "__main__":
    main()
