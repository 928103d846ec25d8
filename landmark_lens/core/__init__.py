from landmark_lens.core.config import get_config
from landmark_lens.core.image_signature import detect_image_format, is_supported_image
from landmark_lens.core.logging import setup_logging

__all__ = ["detect_image_format", "get_config", "is_supported_image", "setup_logging"]
