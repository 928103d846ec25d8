"""Pydantic data contracts for vision provider output."""

from pydantic import BaseModel, ConfigDict, Field


class ModelCard(BaseModel):
    """Metadata identifying a vision provider/model."""

    name: str
    version: str


class ScoredLabel(BaseModel):
    """A caption, tag or object label with the provider's confidence ratio."""

    model_config = ConfigDict(frozen=True)

    name: str
    confidence: float = Field(ge=0.0, le=1.0)


class LandmarkDetection(BaseModel):
    """First landmark candidate from the landmark-domain call; name is None when nothing was found."""

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)


class GeneralAnalysis(BaseModel):
    """Captions, tags and objects from the general-feature call, in provider order."""

    model_config = ConfigDict(frozen=True)

    captions: list[ScoredLabel] = Field(default_factory=list)
    tags: list[ScoredLabel] = Field(default_factory=list)
    objects: list[ScoredLabel] = Field(default_factory=list)


class VisionFindings(BaseModel):
    """Everything the vision provider reported for one image."""

    model_config = ConfigDict(frozen=True)

    landmark_name: str | None = None
    landmark_confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    captions: list[ScoredLabel] = Field(default_factory=list)
    tags: list[ScoredLabel] = Field(default_factory=list)
    objects: list[ScoredLabel] = Field(default_factory=list)

    @classmethod
    def combine(cls, landmark: LandmarkDetection, general: GeneralAnalysis) -> "VisionFindings":
        return cls(
            landmark_name=landmark.name or None,
            landmark_confidence=landmark.confidence if landmark.name else 0.0,
            captions=general.captions,
            tags=general.tags,
            objects=general.objects,
        )
