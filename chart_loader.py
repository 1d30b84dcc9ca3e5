# -*- coding: utf-8 -*-
"""
Chart fetching for the side panel.

Every (region, tab) change issues one request tagged with a token. Issuing a
new request cancels the previous one if it has not started and supersedes its
token, so a slow response for an old tab can never overwrite a newer one.
"""
import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, replace
from typing import Callable, Optional

import plotly.graph_objects as go

from config import Tab
from data_loader import DataLoadError, fetch_chart_spec
from plotting import build_chart_figure

logger = logging.getLogger(__name__)


def load_chart_figure(region_name: str, tab: Tab) -> go.Figure:
    """Fetches the chart specification for a region and tab and builds its figure."""
    return build_chart_figure(fetch_chart_spec(region_name, tab))


@dataclass(frozen=True)
class ChartState:
    region: str
    tab: Tab
    loading: bool = True
    error: bool = False
    figure: Optional[go.Figure] = None


@dataclass(frozen=True)
class _ChartRequest:
    token: int
    region: str
    tab: Tab
    future: Future


class ChartLoader:
    def __init__(
        self,
        fetch: Callable[[str, Tab], go.Figure] = load_chart_figure,
        executor: Optional[Executor] = None,
    ):
        self._fetch = fetch
        self._executor = executor or ThreadPoolExecutor(max_workers=2, thread_name_prefix="chart-fetch")
        self._lock = threading.RLock()
        self._token = 0
        self._request: Optional[_ChartRequest] = None
        self.state: Optional[ChartState] = None

    def request(self, region: str, tab: Tab) -> ChartState:
        """
        Starts fetching the chart for (region, tab) unless that is already the
        current request, and returns the current state.
        """
        with self._lock:
            current = self._request
            if current is not None and current.region == region and current.tab.id == tab.id:
                return self.state

            if current is not None:
                current.future.cancel()
            self._token += 1
            token = self._token
            self.state = ChartState(region=region, tab=tab)
            future = self._executor.submit(self._run, token, region, tab)
            self._request = _ChartRequest(token, region, tab, future)
            return self.state

    def wait(self, timeout: Optional[float] = None) -> Optional[ChartState]:
        """Blocks until the current request settles (or the timeout passes)."""
        request = self._request
        if request is not None:
            wait([request.future], timeout=timeout)
        return self.state

    def reset(self) -> None:
        """Abandons the current request. Nothing is fetched until the next `request`."""
        with self._lock:
            if self._request is not None:
                self._request.future.cancel()
            self._token += 1
            self._request = None
            self.state = None

    def _run(self, token: int, region: str, tab: Tab) -> None:
        try:
            figure = self._fetch(region, tab)
        except DataLoadError as e:
            logger.error("Error loading %s chart for %s: %s", tab.label, region, e)
            self._resolve(token, error=True)
        except Exception:
            logger.exception("Unexpected error building %s chart for %s", tab.label, region)
            self._resolve(token, error=True)
        else:
            self._resolve(token, figure=figure)

    def _resolve(self, token: int, figure: Optional[go.Figure] = None, error: bool = False) -> None:
        with self._lock:
            if token != self._token or self.state is None:
                logger.debug("Discarding stale chart response (token %d, current %d)", token, self._token)
                return
            self.state = replace(self.state, loading=False, error=error, figure=figure)
