"""
Tests for the rich card renderables.
"""

import pytest
from rich.console import Console

from bigtoy.models.idea import Idea
from bigtoy.models.session import FailureKind
from bigtoy.render import render_view
from bigtoy.view_model import Phase, ViewState


@pytest.fixture
def sample_ideas(idea):
    """Fixture providing two validated ideas."""
    return (Idea(**idea("Toy")), Idea(**idea("Game")))


def as_text(renderable) -> str:
    console = Console(record=True, width=100)
    console.print(renderable)
    return console.export_text()


class TestRenderView:
    """Tests for render_view."""

    def test_results_show_numbered_cards(self, sample_ideas):
        text = as_text(render_view(ViewState(phase=Phase.RESULTS, ideas=sample_ideas)))

        assert "Next BIG TOY" in text
        assert "Idea Kit 1" in text
        assert "Idea Kit 2" in text
        assert "Game strategy" in text
        assert "Target Audience" in text

    def test_collapsed_cards_show_summary_only(self, sample_ideas):
        text = as_text(render_view(ViewState(phase=Phase.RESULTS, ideas=sample_ideas), expanded=False))

        assert "Toy source" in text
        assert "Toy market potential" in text
        assert "Toy strategy" not in text

    def test_analyzing_shows_progress(self, sample_ideas):
        text = as_text(render_view(ViewState(phase=Phase.ANALYZING, ideas=sample_ideas[:1])))

        assert "Idea Kit 1" in text
        assert "(1/5)" in text

    def test_error_offers_retry_and_retake(self, sample_ideas):
        view = ViewState(
            phase=Phase.RESULTS,
            ideas=sample_ideas[:1],
            error_message="Daily analysis quota reached.",
            failure_kind=FailureKind.RATE_LIMITED,
            image_url="https://img.test/photo.jpg",
        )

        text = as_text(render_view(view))

        assert "Idea Kit 1" in text
        assert "Daily analysis quota reached." in text
        assert "[r]etry" in text
        assert "[t]ake another photo" in text

    def test_upload_error_offers_only_retake(self):
        view = ViewState(phase=Phase.RESULTS, error_message="Cloudinary is not configured")

        text = as_text(render_view(view))

        assert "[r]etry" not in text
        assert "[t]ake another photo" in text

    def test_idle_shows_language_and_error(self):
        text = as_text(render_view(ViewState(error_message="Image not found")))

        assert "Image not found" in text
        assert "EN" in text


if __name__ == "__main__":
    # This allows running the tests directly with python
    import sys
    sys.exit(pytest.main(["-v", __file__]))
