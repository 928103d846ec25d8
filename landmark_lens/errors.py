"""Exception types raised across the analysis pipeline."""


class LandmarkLensError(Exception):
    """Base class for application errors."""


class VisionProviderError(LandmarkLensError):
    """
    The vision provider call failed (transport, HTTP status or malformed body).

    `call` names the provider operation that failed, when known.
    """

    def __init__(self, message: str, call: str | None = None) -> None:
        super().__init__(message)
        self.call = call
