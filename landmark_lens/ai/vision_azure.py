"""Vision analyzer backed by the Azure Computer Vision REST API.

Two calls are made per image: the landmarks domain model and the general analyze
endpoint. Both reuse one requests.Session with connection pooling, which is shared by
all concurrent requests of the process.

Provider failures are not retried; any transport error, non-2xx status or
unparseable body surfaces as VisionProviderError.
"""

import logging
from io import BytesIO
from typing import Any

import requests
from pydantic import ValidationError

from landmark_lens.ai.schema import (
    GeneralAnalysis,
    LandmarkDetection,
    ModelCard,
    ScoredLabel,
)
from landmark_lens.ai.vision_base import BaseVisionAnalyzer
from landmark_lens.errors import VisionProviderError

_log = logging.getLogger(__name__)

SUBSCRIPTION_KEY_HEADER = "Ocp-Apim-Subscription-Key"


def _scored(items: Any, label_key: str) -> list[ScoredLabel]:
    """Map provider entries ({label_key, confidence}) to ScoredLabel, skipping unnamed ones."""
    out: list[ScoredLabel] = []
    for item in items or []:
        name = item.get(label_key)
        if not name:
            continue
        out.append(ScoredLabel(name=str(name), confidence=float(item.get("confidence") or 0.0)))
    return out


class AzureVisionAnalyzer(BaseVisionAnalyzer):
    """Azure Computer Vision client for landmark and general-feature analysis."""

    def __init__(
        self,
        endpoint: str,
        key: str,
        api_version: str = "v3.2",
        features: list[str] | None = None,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        if not endpoint or not key:
            raise ValueError("Azure vision endpoint and key must both be configured")
        self._endpoint = endpoint.rstrip("/")
        self._key = key
        self._api_version = api_version
        self._features = list(features) if features else ["Description", "Tags", "Objects"]
        self._timeout = timeout
        if session is None:
            session = requests.Session()
            adapter = requests.adapters.HTTPAdapter(pool_connections=10, pool_maxsize=20)
            session.mount("http://", adapter)
            session.mount("https://", adapter)
        self._session = session

    def get_model_card(self) -> ModelCard:
        return ModelCard(name="azure-computer-vision", version=self._api_version)

    def close(self) -> None:
        self._session.close()

    def _post_image(self, path: str, image_bytes: bytes, params: dict | None = None) -> dict:
        """POST the image to {endpoint}/vision/{version}/{path} and return the parsed JSON body."""
        url = f"{self._endpoint}/vision/{self._api_version}/{path.lstrip('/')}"
        # Each call gets its own readable view of the buffer.
        body = BytesIO(image_bytes)
        try:
            resp = self._session.post(
                url,
                params=params,
                data=body,
                headers={
                    SUBSCRIPTION_KEY_HEADER: self._key,
                    "Content-Type": "application/octet-stream",
                },
                timeout=self._timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as e:
            raise VisionProviderError(f"Vision provider call '{path}' failed: {e}", call=path) from e
        except ValueError as e:
            raise VisionProviderError(f"Vision provider call '{path}' returned invalid JSON", call=path) from e
        if not isinstance(data, dict):
            raise VisionProviderError(f"Vision provider call '{path}' returned unexpected payload", call=path)
        return data

    def analyze_landmark(self, image_bytes: bytes) -> LandmarkDetection:
        path = "models/landmarks/analyze"
        data = self._post_image(path, image_bytes)
        try:
            landmarks = (data.get("result") or {}).get("landmarks") or []
            if not landmarks:
                _log.debug("No landmark detected")
                return LandmarkDetection()
            first = landmarks[0]
            detection = LandmarkDetection(
                name=first.get("name") or None,
                confidence=float(first.get("confidence") or 0.0),
            )
        except (ValidationError, TypeError, ValueError, AttributeError) as e:
            raise VisionProviderError(f"Malformed landmark payload: {data.get('result')!r}", call=path) from e
        _log.info("Landmark detected: %s (%.3f)", detection.name, detection.confidence)
        return detection

    def analyze_general(self, image_bytes: bytes) -> GeneralAnalysis:
        data = self._post_image(
            "analyze",
            image_bytes,
            params={"visualFeatures": ",".join(self._features)},
        )
        try:
            return GeneralAnalysis(
                captions=_scored((data.get("description") or {}).get("captions"), "text"),
                tags=_scored(data.get("tags"), "name"),
                objects=_scored(data.get("objects"), "object"),
            )
        except (ValidationError, TypeError, ValueError, AttributeError) as e:
            raise VisionProviderError("Malformed general analysis payload", call="analyze") from e
