"""Smoke tests running the Streamlit script headless via AppTest."""

from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

SCRIPT = str(Path(__file__).resolve().parent.parent / "dashboard.py")


@pytest.fixture
def app() -> AppTest:
    at = AppTest.from_file(SCRIPT, default_timeout=30)
    at.run()
    return at


class TestDashboardApp:
    """First render and sidebar controls."""

    def test_first_render_has_no_exception(self, app: AppTest) -> None:
        assert not app.exception
        assert app.title[0].value == "Real-time Analytics Dashboard"

    def test_session_holds_seeded_controller(self, app: AppTest) -> None:
        controller = app.session_state["controller"]

        assert controller.buffer_length() == 1000
        assert not controller.is_streaming

    def test_kpi_cards_show_initial_counters(self, app: AppTest) -> None:
        labels = [m.label for m in app.metric]

        assert labels[:4] == ["Total Users", "Revenue", "Active Connections", "Throughput"]
        assert app.metric[0].value == "1,247,832"

    def test_reset_keeps_full_history(self, app: AppTest) -> None:
        app.button(key="reset_data").click().run()

        assert not app.exception
        assert app.session_state["controller"].buffer_length() == 1000

    def test_heatmap_is_built_once_per_session(self, app: AppTest) -> None:
        grid = app.session_state["heatmap"]

        app.run()

        assert app.session_state["heatmap"] is grid


class TestStreamControls:
    """Start/Stop buttons reflect the stream state on the rerun the click triggers."""

    def test_start_disables_start_and_enables_stop(self, app: AppTest) -> None:
        app.button(key="start_stream").click().run()

        assert not app.exception
        assert app.session_state["controller"].is_streaming
        assert app.button(key="start_stream").disabled
        assert not app.button(key="stop_stream").disabled

    def test_stop_reenables_start(self, app: AppTest) -> None:
        app.button(key="start_stream").click().run()
        app.button(key="stop_stream").click().run()

        assert not app.exception
        assert not app.session_state["controller"].is_streaming
        assert app.button(key="start_stream").disabled is False
        assert app.button(key="stop_stream").disabled is True

    def test_reset_while_streaming_stops_the_stream(self, app: AppTest) -> None:
        app.button(key="start_stream").click().run()
        app.button(key="reset_data").click().run()

        assert not app.session_state["controller"].is_streaming
        assert app.button(key="start_stream").disabled is False
