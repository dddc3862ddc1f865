import cv2
import numpy as np

from alpr_stage.domain.errors import ImageReadError


def read_image_file(path: str) -> bytes:
    """Lee los bytes de una imagen desde disco (override de bench/smoke)."""
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise ImageReadError(f"No se pudo leer la imagen {path}: {e}") from e


def ensure_decodable(image_bytes: bytes) -> bytes:
    """
    Verifica que los bytes sean una imagen que OpenCV puede decodificar.
    OpenALPR decodifica con OpenCV y ante basura devuelve 0 placas en vez de fallar.
    """
    if not image_bytes:
        raise ImageReadError("Buffer de imagen vacío")

    buf = np.frombuffer(image_bytes, dtype=np.uint8)
    img = cv2.imdecode(buf, cv2.IMREAD_COLOR)
    if img is None or img.size == 0:
        raise ImageReadError(f"Bytes de imagen corruptos o formato no soportado ({len(image_bytes)} bytes)")
    return image_bytes
