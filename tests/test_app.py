"""Tests for result bookkeeping in the preview application."""

import numpy as np
import pytest
from PIL import Image

from kpalette.components.app import App
from kpalette.config import ClusterSettings


class HeldExecutor:
    """Records submitted jobs without running them."""

    def __init__(self):
        self.submitted = []

    def submit(self, fn, *args):
        self.submitted.append((fn, args))

    def shutdown(self, wait=True, cancel_futures=False):
        pass


def result(value):
    return np.full((2, 3), value, dtype=np.uint8), np.zeros(4, dtype=np.intp)


@pytest.fixture
def app(monkeypatch):
    app = App("input.png", Image.new("RGB", (2, 2)), ClusterSettings(seed=1, jobs=1))
    app.executor.shutdown()
    app.executor = HeldExecutor()
    app.shown = []
    monkeypatch.setattr(
        app, "show_result", lambda settings, _result: app.shown.append(settings)
    )
    return app


class TestProcess:
    def test_uncached_settings_are_clustered_in_background(self, app):
        settings = ClusterSettings(n_colors=3, seed=7, jobs=1)
        app.process(settings)

        assert len(app.executor.submitted) == 1
        assert app.pending_key == settings.cache_key()
        assert app.shown == []

    def test_finished_run_is_shown(self, app):
        settings = ClusterSettings(n_colors=3, seed=7, jobs=1)
        app.process(settings)
        app._update_result(settings, result(1))

        assert app.shown == [settings]
        assert app.pending_key is None
        assert app.result_cache.get(settings.cache_key()) is not None

    def test_cached_result_is_not_replaced_by_older_run(self, app):
        running = ClusterSettings(n_colors=3, seed=7, jobs=1)
        cached = ClusterSettings(n_colors=2, seed=7, jobs=1)
        app.result_cache.put(cached.cache_key(), result(2))

        app.process(running)
        app.process(cached)
        app._update_result(running, result(3))

        assert app.shown == [cached]
        assert app.cluster_settings == cached
        # the finished run is still kept for later
        assert app.result_cache.get(running.cache_key()) is not None

    def test_output_filename_follows_current_settings(self, app):
        app.process(ClusterSettings(n_colors=4, seed=9, jobs=1))
        assert app.output_filename() == "input_k4_s9.png"
