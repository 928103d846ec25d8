"""AI module: vision data contracts and provider abstraction."""

from landmark_lens.ai.schema import (
    GeneralAnalysis,
    LandmarkDetection,
    ModelCard,
    ScoredLabel,
    VisionFindings,
)
from landmark_lens.ai.vision_base import (
    BaseVisionAnalyzer,
    GeneralAnalyzer,
    LandmarkAnalyzer,
    MockVisionAnalyzer,
)
from landmark_lens.ai.factory import get_vision_analyzer

__all__ = [
    "BaseVisionAnalyzer",
    "GeneralAnalysis",
    "GeneralAnalyzer",
    "LandmarkAnalyzer",
    "LandmarkDetection",
    "MockVisionAnalyzer",
    "ModelCard",
    "ScoredLabel",
    "VisionFindings",
    "get_vision_analyzer",
]
