"""
Shared fixtures: a stub generation client and a TestClient bound to it.
"""
import json

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.routes.analyze import get_analysis_service
from app.services.pipeline import AnalysisService
from app.services.prompts import DEFAULT_ROSTER


class StubGenerationClient:
    """Records every payload; returns ``text`` or raises ``exc``."""

    def __init__(self, text=None, exc=None):
        self.text = text
        self.exc = exc
        self.calls = []

    async def generate(self, payload):
        self.calls.append(payload)
        if self.exc is not None:
            raise self.exc
        return self.text


def make_records(n, names=None):
    names = list(names or DEFAULT_ROSTER.names)
    return [
        {
            "thinker": names[i % len(names)],
            "generalApproach": f"Approche générale {i}",
            "specificAnalysis": f"Analyse spécifique {i}",
        }
        for i in range(n)
    ]


def fenced(data, lang="json"):
    return f"```{lang}\n{json.dumps(data, ensure_ascii=False)}\n```"


@pytest.fixture
def stub():
    return StubGenerationClient(text=fenced(make_records(8)))


@pytest.fixture
def service(stub):
    return AnalysisService(stub)


@pytest.fixture
def client(service):
    app.dependency_overrides[get_analysis_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


class FakeModels:
    """Stands in for ``genai.Client().aio.models``."""

    def __init__(self, result=None, exc=None):
        self.result = result
        self.exc = exc
        self.calls = []

    async def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if self.exc is not None:
            raise self.exc
        return self.result
