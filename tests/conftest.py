"""Pytest fixtures: deterministic vision analyzers and knowledge-base searchers."""

from unittest.mock import MagicMock

import pytest

from landmark_lens.ai.schema import GeneralAnalysis, LandmarkDetection, ModelCard
from landmark_lens.ai.vision_base import BaseVisionAnalyzer
from landmark_lens.core import config as config_module
from landmark_lens.enrichment.schema import LocationInfo
from landmark_lens.enrichment.searchers import LocationSearcher

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 24

LIBERTY = LocationInfo(
    name="Statue of Liberty",
    description="The Statue of Liberty is a colossal neoclassical sculpture on Liberty Island.",
    latitude=40.6892,
    longitude=-74.0445,
    source="Wikipedia",
    url="https://en.wikipedia.org/wiki/Statue_of_Liberty",
    thumbnail_url="https://upload.wikimedia.org/liberty.jpg",
)


class ScriptedSearcher(LocationSearcher):
    """
    Searcher whose answers come from a dict: term -> LocationInfo (hit), Exception (raised
    inside the lookup) or missing (no match). Every looked-up term is recorded in `calls`.
    """

    def __init__(self, source: str, responses: dict | None = None) -> None:
        super().__init__(session=MagicMock())
        self.source = source
        self.responses = dict(responses or {})
        self.calls: list[str] = []
        self.closed = False

    def _lookup(self, term: str) -> LocationInfo | None:
        self.calls.append(term)
        answer = self.responses.get(term)
        if isinstance(answer, Exception):
            raise answer
        return answer

    def close(self) -> None:
        self.closed = True


class ScriptedAnalyzer(BaseVisionAnalyzer):
    """Vision analyzer returning fixed findings; counts calls and optionally raises."""

    def __init__(
        self,
        landmark: LandmarkDetection | None = None,
        general: GeneralAnalysis | None = None,
        error: Exception | None = None,
    ) -> None:
        self.landmark = landmark or LandmarkDetection()
        self.general = general or GeneralAnalysis()
        self.error = error
        self.landmark_calls = 0
        self.general_calls = 0

    def get_model_card(self) -> ModelCard:
        return ModelCard(name="scripted", version="test")

    def analyze_landmark(self, image_bytes: bytes) -> LandmarkDetection:
        self.landmark_calls += 1
        if self.error is not None:
            raise self.error
        return self.landmark

    def analyze_general(self, image_bytes: bytes) -> GeneralAnalysis:
        self.general_calls += 1
        return self.general


@pytest.fixture
def primary() -> ScriptedSearcher:
    return ScriptedSearcher("Wikipedia")


@pytest.fixture
def fallback() -> ScriptedSearcher:
    return ScriptedSearcher("Wikidata")


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture
def liberty() -> LocationInfo:
    return LIBERTY


@pytest.fixture(autouse=True)
def _clean_config():
    """Each test starts and ends without a cached Settings object."""
    config_module.reset_config()
    yield
    config_module.reset_config()
