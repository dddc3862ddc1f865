import threading
import time
from typing import Dict, List, Optional, Tuple

import cv2
import numpy as np
import pytest

from alpr_stage.domain.Interfaces.alpr_engine import IAlprEngine
from alpr_stage.domain.Interfaces.relationship_sink import IRelationshipSink
from alpr_stage.domain.Models.engine_config import EngineConfig, StageConfig
from alpr_stage.domain.Models.outcome import Relationship
from alpr_stage.domain.Models.recognition_result import (
    RecognitionResult, PlateGroup, PlateCandidate
)
from alpr_stage.domain.Models.work_unit import WorkUnit


def make_png(value: int = 128, width: int = 120, height: int = 40) -> bytes:
    """PNG válido y distinto por valor de gris."""
    img = np.full((height, width, 3), value, dtype=np.uint8)
    ok, buf = cv2.imencode(".png", img)
    assert ok
    return buf.tobytes()


class RecordingSink(IRelationshipSink):
    """Sink en memoria, thread-safe."""

    def __init__(self):
        self.transfers: List[Tuple[WorkUnit, Relationship]] = []
        self._lock = threading.Lock()

    def transfer(self, unit: WorkUnit, relationship: Relationship) -> None:
        with self._lock:
            self.transfers.append((unit, relationship))

    def routed(self, relationship: Relationship) -> List[WorkUnit]:
        return [u for u, r in self.transfers if r is relationship]


class ScriptedEngine(IAlprEngine):
    """
    Motor fake: devuelve la placa asociada a los bytes recibidos
    (o default_plate) y registra concurrencia y liberaciones.
    """

    def __init__(self, plates: Optional[Dict[bytes, str]] = None, default_plate: str = "ABC1234",
                 confidence: float = 92.3, delay: float = 0.0, error: Optional[Exception] = None,
                 raw_result=None):
        self.plates = plates or {}
        self.default_plate = default_plate
        self.confidence = confidence
        self.delay = delay
        self.error = error
        self.raw_result = raw_result
        self.received: List[bytes] = []
        self.release_count = 0
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def recognize(self, image_bytes: bytes) -> RecognitionResult:
        with self._lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
            self.received.append(image_bytes)
        try:
            if self.delay:
                time.sleep(self.delay)
            if self.error is not None:
                raise self.error
            if self.raw_result is not None:
                return self.raw_result
            plate = self.plates.get(image_bytes, self.default_plate)
            return RecognitionResult(
                plate_groups=[PlateGroup(candidates=[PlateCandidate(plate, self.confidence)])],
                total_processing_time_ms=15.5,
            )
        finally:
            with self._lock:
                self.active -= 1

    def release(self) -> None:
        self.release_count += 1


class EngineFactoryRecorder:
    """engine_factory que devuelve motores pre-armados y guarda la config recibida."""

    def __init__(self, *engines: IAlprEngine):
        self.engines = list(engines)
        self.configs: List[EngineConfig] = []

    def __call__(self, config: EngineConfig) -> IAlprEngine:
        self.configs.append(config)
        return self.engines[len(self.configs) - 1]


@pytest.fixture
def engine_paths(tmp_path):
    conf = tmp_path / "openalpr.conf"
    conf.write_text("[common]\n")
    runtime = tmp_path / "runtime_data"
    runtime.mkdir()
    return str(conf), str(runtime)


@pytest.fixture
def engine_config(engine_paths):
    conf, runtime = engine_paths
    return EngineConfig.create(
        country_code="us",
        config_path=conf,
        runtime_data_path=runtime,
        top_n=5,
        default_region="ga",
    )


@pytest.fixture
def stage_config(engine_config):
    return StageConfig.create(engine=engine_config)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def png_bytes():
    return make_png()
