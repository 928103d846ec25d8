"""Factory for vision analyzers."""

from landmark_lens.ai.vision_base import BaseVisionAnalyzer
from landmark_lens.core.config import Settings, get_config


def get_vision_analyzer(analyzer_name: str, settings: Settings | None = None) -> BaseVisionAnalyzer:
    """Return a vision analyzer by name, configured from settings (default: get_config())."""
    if analyzer_name == "mock":
        from landmark_lens.ai.vision_base import MockVisionAnalyzer

        return MockVisionAnalyzer()
    if analyzer_name == "azure":
        from landmark_lens.ai.vision_azure import AzureVisionAnalyzer

        cfg = settings or get_config()
        return AzureVisionAnalyzer(
            endpoint=cfg.azure_vision_endpoint,
            key=cfg.azure_vision_key,
            api_version=cfg.azure_vision_api_version,
            features=cfg.vision_features,
            timeout=cfg.vision_timeout_seconds,
        )
    raise ValueError(f"Unknown vision analyzer: {analyzer_name}")
