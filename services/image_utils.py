import numpy as np
import cv2

from domain.dtos import PixelBuffer
from domain.errors import InvalidInput

class ImageDecodeError(ValueError):
    pass

def bytes_to_cv2(b: bytes) -> np.ndarray:
    arr = np.asarray(bytearray(b), dtype=np.uint8)
    img = cv2.imdecode(arr, cv2.IMREAD_UNCHANGED)
    if img is None:
        raise ImageDecodeError("Could not decode image bytes")
    return img

def cv2_to_rgba(img: np.ndarray) -> np.ndarray:
    """OpenCV image (gray, BGR or BGRA) to an RGBA uint8 array."""
    if img.dtype == np.uint16:  # 16-bit PNG/TIFF
        img = (img >> 8).astype(np.uint8)
    elif img.dtype != np.uint8:
        raise ImageDecodeError(f"Unsupported sample type: {img.dtype}")
    if img.ndim == 2:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2RGBA)
    channels = img.shape[2]
    if channels == 3:
        return cv2.cvtColor(img, cv2.COLOR_BGR2RGBA)
    if channels == 4:
        return cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)
    raise ImageDecodeError(f"Unsupported channel count: {channels}")

def array_to_buffer(image_rgba: np.ndarray) -> PixelBuffer:
    if image_rgba.ndim != 3 or image_rgba.shape[2] != 4 or image_rgba.dtype != np.uint8:
        raise InvalidInput(f"expected an HxWx4 uint8 array, got {image_rgba.shape} {image_rgba.dtype}")
    h, w = image_rgba.shape[:2]
    return PixelBuffer(width=w, height=h, data=np.ascontiguousarray(image_rgba).tobytes())

def bytes_to_buffer(b: bytes) -> PixelBuffer:
    return array_to_buffer(cv2_to_rgba(bytes_to_cv2(b)))
