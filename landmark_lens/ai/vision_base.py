"""Abstract capabilities and mock implementation for vision analyzers."""

from abc import ABC, abstractmethod

from landmark_lens.ai.schema import (
    GeneralAnalysis,
    LandmarkDetection,
    ModelCard,
    ScoredLabel,
)


class LandmarkAnalyzer(ABC):
    """Landmark-domain detection over raw image bytes."""

    @abstractmethod
    def analyze_landmark(self, image_bytes: bytes) -> LandmarkDetection:
        """Return the first landmark candidate, or an empty detection."""
        ...

    def close(self) -> None:
        """Release pooled connections, if any."""


class GeneralAnalyzer(ABC):
    """General feature analysis (captions, tags, objects) over raw image bytes."""

    @abstractmethod
    def analyze_general(self, image_bytes: bytes) -> GeneralAnalysis:
        ...

    def close(self) -> None:
        """Release pooled connections, if any."""


class BaseVisionAnalyzer(LandmarkAnalyzer, GeneralAnalyzer):
    """A provider that offers both capabilities."""

    @abstractmethod
    def get_model_card(self) -> ModelCard:
        """Return provider identity (name, version)."""
        ...


class MockVisionAnalyzer(BaseVisionAnalyzer):
    """Deterministic analyzer for development and tests."""

    def get_model_card(self) -> ModelCard:
        return ModelCard(name="mock-analyzer", version="1.0")

    def analyze_landmark(self, image_bytes: bytes) -> LandmarkDetection:
        return LandmarkDetection(name="Statue of Liberty", confidence=0.855)

    def analyze_general(self, image_bytes: bytes) -> GeneralAnalysis:
        return GeneralAnalysis(
            captions=[ScoredLabel(name="a statue of a person holding a torch", confidence=0.62)],
            tags=[
                ScoredLabel(name="statue", confidence=0.97),
                ScoredLabel(name="sky", confidence=0.95),
                ScoredLabel(name="monument", confidence=0.81),
            ],
            objects=[ScoredLabel(name="statue", confidence=0.74)],
        )
