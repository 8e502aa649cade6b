# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
CatShare Cards - Image I/O and Conversion Utilities
Shared helpers used by the image source, the compositor and the encoder.
Decoding and encoding go through OpenCV (BGR numpy arrays); drawing
happens on Pillow images, so conversion lives at the PIL bridge.
"""

from __future__ import annotations

import base64
import binascii

import cv2
import numpy as np
from PIL import Image

PNG_MIME = "image/png"


# ─── Decode / Encode ─────────────────────────────────────────────────────────

def bytes_to_bgr(data: bytes) -> np.ndarray:
    """
    Decode raw image bytes to a BGR or BGRA numpy array.
    Alpha is kept so transparent product photos sit on the panel colour.
    """
    arr = np.frombuffer(data, dtype=np.uint8)
    img = cv2.imdecode(arr, cv2.IMREAD_UNCHANGED)
    if img is None:
        raise ValueError("Could not decode image bytes.")
    if img.ndim == 2:
        img = cv2.cvtColor(img, cv2.COLOR_GRAY2BGR)
    if img.dtype != np.uint8:
        img = cv2.convertScaleAbs(img, alpha=255.0 / 65535.0)
    return img


def bgr_to_png_bytes(img: np.ndarray) -> bytes:
    """Encode a BGR numpy array to PNG bytes (lossless)."""
    success, buf = cv2.imencode(".png", img)
    if not success:
        raise RuntimeError("Failed to encode image to PNG bytes.")
    return buf.tobytes()


def decode_to_pil(data: bytes) -> Image.Image:
    """Decode image bytes straight into an RGBA Pillow image."""
    img = bytes_to_bgr(data)
    if img.shape[2] == 4:
        return Image.fromarray(cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA))
    return bgr_to_pil(img).convert("RGBA")


# ─── Data URIs ───────────────────────────────────────────────────────────────

def encode_data_uri(data: bytes, mime: str = PNG_MIME) -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def decode_data_uri(uri: str) -> bytes:
    """
    Extract the payload of a base64 data URI.
    Raises ValueError if the URI is not a base64 data URI.
    """
    if not uri.startswith("data:") or "," not in uri:
        raise ValueError("Not a data URI.")
    header, payload = uri.split(",", 1)
    if not header.endswith(";base64"):
        raise ValueError("Only base64 data URIs are supported.")
    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as exc:
        raise ValueError(f"Malformed base64 payload: {exc}") from exc


# ─── PIL Bridge ──────────────────────────────────────────────────────────────

def bgr_to_pil(img: np.ndarray) -> Image.Image:
    """Convert BGR numpy array to PIL Image (RGB mode)."""
    return Image.fromarray(cv2.cvtColor(img, cv2.COLOR_BGR2RGB))


def pil_to_bgr(pil_img: Image.Image) -> np.ndarray:
    """Convert PIL Image to BGR numpy array."""
    return cv2.cvtColor(np.array(pil_img.convert("RGB")), cv2.COLOR_RGB2BGR)

