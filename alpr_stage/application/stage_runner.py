import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable

from alpr_stage.application.recognition_stage import RecognitionStage
from alpr_stage.domain.Interfaces.alpr_engine import IAlprEngine
from alpr_stage.domain.Interfaces.work_source import IWorkSource
from alpr_stage.domain.Models.outcome import Relationship
from alpr_stage.domain.Models.work_unit import WorkUnit

logger = logging.getLogger(__name__)


def run_units(stage: RecognitionStage, handle: IAlprEngine,
              units: Iterable[WorkUnit], workers: int = 1) -> Dict[str, int]:
    """
    Procesa units contra un handle ya preparado. Devuelve conteo por relación.
    Con workers > 1, las llamadas concurrentes quedan serializadas (o repartidas
    en el pool) por el propio handle.
    """
    counts = {rel.value: 0 for rel in Relationship}

    if workers <= 1:
        outcomes = (stage.process(handle, u) for u in units)
        for outcome in outcomes:
            counts[outcome.relationship.value] += 1
        return counts

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="alpr-proc") as pool:
        for outcome in pool.map(lambda u: stage.process(handle, u), units):
            counts[outcome.relationship.value] += 1
    return counts


def run_stage(stage: RecognitionStage, source: IWorkSource, workers: int = 1) -> Dict[str, int]:
    """
    Una activación completa: prepare -> units del source -> release.
    EngineInitError se propaga sin procesar ningún unit.
    """
    with stage.activation() as handle:
        counts = run_units(stage, handle, source.units(), workers=workers)

    logger.info("Activación terminada: success=%d failure=%d",
                counts[Relationship.SUCCESS.value], counts[Relationship.FAILURE.value])
    return counts
