# alpr_stage/infrastructure/OpenALPR/engine_handle.py
import logging
import queue
import threading
from typing import List

from alpr_stage.domain.Interfaces.alpr_engine import IAlprEngine
from alpr_stage.domain.Models.recognition_result import RecognitionResult
from alpr_stage.domain.errors import EngineReleasedError

logger = logging.getLogger(__name__)


class GuardedEngine(IAlprEngine):
    """
    Handle exclusivo sobre un motor crudo:
    - un lock serializa recognize (el motor no es thread-safe)
    - release() descarga el motor una sola vez; las siguientes son no-op
    - recognize() después de release() -> EngineReleasedError
    """

    def __init__(self, engine: IAlprEngine, name: str = "engine-0"):
        self.engine = engine
        self.name = name
        self._lock = threading.Lock()
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def recognize(self, image_bytes: bytes) -> RecognitionResult:
        with self._lock:
            if self._released:
                raise EngineReleasedError(f"{self.name} ya fue liberado")
            return self.engine.recognize(image_bytes)

    def release(self) -> None:
        # espera a que termine el recognize en curso, si lo hay
        with self._lock:
            if self._released:
                logger.warning("%s: release() repetido ignorado", self.name)
                return
            self._released = True
            self.engine.release()


class EnginePool(IAlprEngine):
    """
    Pool de handles. Cada recognize toma un handle en exclusiva (cola bloqueante)
    y lo devuelve al terminar, así N llamadas concurrentes usan N motores distintos.
    """

    def __init__(self, handles: List[GuardedEngine]):
        if not handles:
            raise ValueError("EnginePool requiere al menos un handle")
        self.handles = list(handles)
        self._idle: "queue.Queue[GuardedEngine]" = queue.Queue()
        for h in self.handles:
            self._idle.put_nowait(h)
        self._released = False
        self._release_lock = threading.Lock()

    @property
    def size(self) -> int:
        return len(self.handles)

    @property
    def released(self) -> bool:
        return self._released

    def recognize(self, image_bytes: bytes) -> RecognitionResult:
        if self._released:
            raise EngineReleasedError("EnginePool ya fue liberado")
        handle = self._idle.get()
        try:
            return handle.recognize(image_bytes)
        finally:
            self._idle.put_nowait(handle)

    def release(self) -> None:
        with self._release_lock:
            if self._released:
                logger.warning("EnginePool: release() repetido ignorado")
                return
            self._released = True
        for h in self.handles:
            try:
                h.release()
            except Exception:
                # un motor que falla al liberar no impide liberar el resto
                logger.exception("Error liberando %s", h.name)
