"""
Shared fixtures and fakes for the bigtoy test suite.
"""

import asyncio
import json

import pytest

from bigtoy.models.session import SessionState


def make_idea(tag):
    """Raw idea element as the endpoint sends it."""
    return {
        "source": f"{tag} source",
        "strategy": f"{tag} strategy",
        "marketing": f"{tag} marketing",
        "market_potential": f"{tag} market potential",
        "target_audience": f"{tag} target audience",
    }


def ideas_line(*tags, raw=None):
    """One newline-terminated stream line holding the given ideas."""
    ideas = [make_idea(tag) for tag in tags] if raw is None else raw
    return json.dumps({"ideas": ideas}, ensure_ascii=False) + "\n"


class FakeIdeaClient:
    """Stands in for IdeaStreamClient; replays one script per request."""

    def __init__(self, *scripts):
        # Each script is (chunks, error, delay)
        self.scripts = list(scripts)
        self.requests = []

    async def stream_ideas(self, request):
        self.requests.append(request)
        script = self.scripts.pop(0) if len(self.scripts) > 1 else self.scripts[0]
        chunks, error, delay = script
        for chunk in chunks:
            if delay:
                await asyncio.sleep(delay)
            yield chunk.encode("utf-8") if isinstance(chunk, str) else chunk
        if error is not None:
            raise error


def script(*chunks, error=None, delay=0.0):
    return (list(chunks), error, delay)


class Recorder:
    """Collects every published snapshot."""

    def __init__(self):
        self.states = []

    def __call__(self, state: SessionState):
        self.states.append(state)

    @property
    def statuses(self):
        return [state.status.value for state in self.states]


@pytest.fixture
def idea():
    """Fixture providing the raw idea factory."""
    return make_idea


@pytest.fixture
def line():
    """Fixture providing the stream line factory."""
    return ideas_line


@pytest.fixture
def fake_client():
    """Fixture providing the fake idea client factory."""
    return FakeIdeaClient


@pytest.fixture
def stream_script():
    """Fixture providing the script builder for the fake client."""
    return script


@pytest.fixture
def recorder():
    """Fixture providing a snapshot recorder."""
    return Recorder()
