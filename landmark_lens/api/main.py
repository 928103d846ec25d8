"""HTTP API: image upload endpoint and health check."""

import logging
from contextlib import asynccontextmanager
from functools import lru_cache

from fastapi import Depends, FastAPI, File, HTTPException, UploadFile, status

from landmark_lens.assembler import AnalysisResult
from landmark_lens.core.config import get_config
from landmark_lens.core.image_signature import is_supported_image
from landmark_lens.core.logging import get_flight_logger, setup_logging
from landmark_lens.errors import VisionProviderError
from landmark_lens.service import AnalysisService, build_analysis_service

_log = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _get_analysis_service() -> AnalysisService:
    return build_analysis_service(get_config())


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    # Built once at startup; request handlers only read the cached instance.
    _get_analysis_service()
    yield
    if _get_analysis_service.cache_info().currsize:
        _get_analysis_service().close()
        _get_analysis_service.cache_clear()


app = FastAPI(title="Landmark Lens", lifespan=lifespan)


@app.get("/health")
def health() -> dict:
    return {"status": "ok", "vision_provider": get_config().vision_provider}


@app.post("/api/image/analyze", response_model=AnalysisResult)
def analyze_image(
    image: UploadFile | None = File(default=None),
    service: AnalysisService = Depends(_get_analysis_service),
) -> AnalysisResult:
    """Validate the upload, run vision analysis and location enrichment."""
    data = image.file.read() if image is not None else b""
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No image uploaded.")
    if not is_supported_image(data):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Uploaded file is not a valid image.",
        )

    try:
        return service.analyze(data)
    except VisionProviderError as e:
        _log.error("Vision provider failed for %s: %s", image.filename, e)
        if get_config().forensic_dump_on_provider_error:
            fl = get_flight_logger()
            if fl is not None:
                label = f"vision_provider_error_{e.call or 'unknown'}"
                path = fl.dump(label, context={"upload": image.filename, "call": e.call, "error": str(e)})
                _log.warning("Flight log written to %s", path)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e
