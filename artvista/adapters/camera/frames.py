"""
Frame <-> image bytes helpers.

Frames travel through the pipeline as RGB uint8 arrays; OpenCV works in BGR,
so every boundary with cv2 converts explicitly.
"""
import base64
import binascii
import re

import cv2
import numpy as np

from artvista.orchestrator.contracts import Frame

_DATA_URL_RE = re.compile(r"^data:image/(png|jpeg|jpg);base64,")


def strip_data_url(image: str) -> str:
    return _DATA_URL_RE.sub("", image.strip())


def decode_image(image_bytes: bytes) -> Frame | None:
    arr = np.frombuffer(image_bytes, dtype=np.uint8)
    if arr.size == 0:
        return None
    bgr = cv2.imdecode(arr, cv2.IMREAD_COLOR)
    if bgr is None:
        return None
    return cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB)


def frame_from_base64(image: str) -> Frame | None:
    """Decode a base64 image (optionally a data URL). None when undecodable."""
    try:
        raw = base64.b64decode(strip_data_url(image), validate=True)
    except (binascii.Error, ValueError):
        return None
    return decode_image(raw)


def encode_jpeg(frame: Frame, quality: int = 80) -> bytes:
    bgr = cv2.cvtColor(frame, cv2.COLOR_RGB2BGR)
    ok, buf = cv2.imencode(".jpg", bgr, [cv2.IMWRITE_JPEG_QUALITY, quality])
    if not ok:
        raise ValueError("jpeg encoding failed")
    return bytes(buf)
