"""Fold vision findings and the optional location into the response contract."""

from decimal import ROUND_HALF_UP, Decimal

from pydantic import BaseModel, ConfigDict, Field

from landmark_lens.ai.schema import ScoredLabel, VisionFindings
from landmark_lens.enrichment.schema import LocationInfo

_ONE_DECIMAL = Decimal("0.1")


class AnalysisResult(BaseModel):
    """Final response for one image. Confidence ratios stay in [0, 1]; lists carry display strings."""

    model_config = ConfigDict(frozen=True)

    landmark_name: str | None = None
    landmark_confidence: float | None = None  # None unless landmark_name is set
    descriptions: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    objects: list[str] = Field(default_factory=list)
    location_info: LocationInfo | None = None


def format_confidence(ratio: float) -> str:
    """Render a ratio as a percentage with one decimal, rounding half-up (0.855 -> '85.5%')."""
    # str() first so the shortest repr is rounded, not the binary float.
    percent = (Decimal(str(ratio)) * 100).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP)
    return f"{percent}%"


def format_label(label: ScoredLabel) -> str:
    return f"{label.name} ({format_confidence(label.confidence)})"


def assemble_result(findings: VisionFindings, location: LocationInfo | None) -> AnalysisResult:
    has_landmark = bool(findings.landmark_name)
    return AnalysisResult(
        landmark_name=findings.landmark_name if has_landmark else None,
        landmark_confidence=findings.landmark_confidence if has_landmark else None,
        descriptions=[format_label(c) for c in findings.captions],
        tags=[format_label(t) for t in findings.tags],
        objects=[format_label(o) for o in findings.objects],
        location_info=location,
    )
