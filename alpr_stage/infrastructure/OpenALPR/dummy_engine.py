import logging
from typing import List

from alpr_stage.domain.Interfaces.alpr_engine import IAlprEngine
from alpr_stage.domain.Models.engine_config import EngineConfig
from alpr_stage.domain.Models.recognition_result import (
    RecognitionResult, PlateGroup, PlateCandidate
)
from alpr_stage.infrastructure.OpenALPR.openalpr_engine import check_engine_paths

logger = logging.getLogger(__name__)

# confusiones típicas del OCR de placas
_SWAPS = {"0": "O", "O": "0", "1": "I", "I": "1", "8": "B", "B": "8", "5": "S", "S": "5"}


class DummyAlprEngine(IAlprEngine):
    """
    Implementación dummy y determinista: siempre "detecta" la misma placa.
    Sirve para smoke tests sin libopenalpr. Verifica las mismas rutas que el motor real.
    """

    def __init__(self, config: EngineConfig, plate: str = "FAKE123",
                 confidence: float = 91.5, processing_time_ms: float = 12.0):
        check_engine_paths(config)
        self.config = config
        self.plate = plate
        self.confidence = confidence
        self.processing_time_ms = processing_time_ms
        self.released = False

    def recognize(self, image_bytes: bytes) -> RecognitionResult:
        candidates = [
            PlateCandidate(characters=text, confidence_overall=max(0.0, self.confidence - 7.5 * i))
            for i, text in enumerate(self._variants())
        ][: self.config.top_n]
        return RecognitionResult(
            plate_groups=[PlateGroup(candidates=candidates, region=self.config.default_region)],
            total_processing_time_ms=self.processing_time_ms,
        )

    def release(self) -> None:
        self.released = True
        logger.debug("DummyAlprEngine liberado")

    def _variants(self) -> List[str]:
        variants = [self.plate]
        for i, ch in enumerate(self.plate):
            if ch in _SWAPS:
                variants.append(self.plate[:i] + _SWAPS[ch] + self.plate[i + 1:])
        return variants
