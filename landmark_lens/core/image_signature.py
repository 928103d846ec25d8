"""Magic-number sniffing for uploaded images (first 4 bytes only, no decoding)."""

from typing import BinaryIO

SIGNATURE_LENGTH = 4

# Format name -> required prefix of the zero-padded first 4 bytes.
IMAGE_SIGNATURES: dict[str, bytes] = {
    "jpeg": b"\xff\xd8\xff",
    "png": b"\x89PNG",
    "gif": b"GIF8",
    "bmp": b"BM",
}


def _header(data: bytes) -> bytes:
    return data[:SIGNATURE_LENGTH].ljust(SIGNATURE_LENGTH, b"\x00")


def detect_image_format(data: bytes) -> str | None:
    """Return the format whose signature prefixes data, or None."""
    header = _header(data)
    for name, signature in IMAGE_SIGNATURES.items():
        if header.startswith(signature):
            return name
    return None


def is_supported_image(data: bytes) -> bool:
    return detect_image_format(data) is not None


def stream_has_image_signature(stream: BinaryIO) -> bool:
    """Check the signature at the start of a seekable stream; the stream is left at position 0."""
    stream.seek(0)
    try:
        header = stream.read(SIGNATURE_LENGTH) or b""
    finally:
        stream.seek(0)
    return is_supported_image(header)
