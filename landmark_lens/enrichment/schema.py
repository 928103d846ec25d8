"""Pydantic contracts for knowledge-base lookups."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class LocationInfo(BaseModel):
    """One enrichment result, produced by exactly one successful search."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    source: str
    url: str | None = None
    thumbnail_url: str | None = None


class SearchStatus(str, Enum):
    found = "found"
    not_found = "not_found"
    error = "error"


class SearchResult(BaseModel):
    """Outcome of one search call. Errors are reported here rather than raised."""

    model_config = ConfigDict(frozen=True)

    status: SearchStatus
    location: LocationInfo | None = None
    error: str | None = None

    @property
    def found(self) -> bool:
        return self.status is SearchStatus.found

    @classmethod
    def hit(cls, location: LocationInfo) -> "SearchResult":
        return cls(status=SearchStatus.found, location=location)

    @classmethod
    def miss(cls) -> "SearchResult":
        return cls(status=SearchStatus.not_found)

    @classmethod
    def failed(cls, message: str) -> "SearchResult":
        return cls(status=SearchStatus.error, error=message)
