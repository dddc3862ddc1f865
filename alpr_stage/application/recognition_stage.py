import json
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from contextlib import contextmanager
from numbers import Real
from typing import Callable, Dict, Iterator, List, Optional

from alpr_stage.monitoring.metrics import (
    units_routed_total, plates_found_total,
    recognition_latency, engine_init_failures_total
)

from alpr_stage.domain.Models.engine_config import EngineConfig, StageConfig
from alpr_stage.domain.Models.work_unit import WorkUnit
from alpr_stage.domain.Models.recognition_result import RecognitionResult, PlateGroup
from alpr_stage.domain.Models.outcome import Outcome, PrepareResult
from alpr_stage.domain.Interfaces.alpr_engine import IAlprEngine
from alpr_stage.domain.Interfaces.relationship_sink import IRelationshipSink
from alpr_stage.domain.errors import (
    StageError, EngineInitError, ImageReadError,
    RecognitionError, RecognitionTimeoutError
)
from alpr_stage.infrastructure.OpenALPR.engine_handle import GuardedEngine, EnginePool
from alpr_stage.infrastructure.Image.image_validator import read_image_file, ensure_decodable

logger = logging.getLogger(__name__)

EngineFactory = Callable[[EngineConfig], IAlprEngine]


class RecognitionStage:
    """
    Etapa única: bytes de imagen -> motor ALPR -> success / failure.

    Ciclo de vida por activación:
        prepare()        construye el/los motor(es) una vez
        process(h, u)    por cada work unit; nunca propaga errores del unit
        release(h)       libera el motor una vez, incluso si no hubo units

    activation() envuelve los tres pasos y garantiza release en todo camino de salida.
    """

    def __init__(
        self,
        config: StageConfig,
        sink: IRelationshipSink,
        engine_factory: Optional[EngineFactory] = None,
    ):
        self.config = config
        self.sink = sink
        if engine_factory is None:
            from alpr_stage.infrastructure.OpenALPR.factory import create_alpr_engine
            engine_factory = create_alpr_engine
        self.engine_factory = engine_factory

        # un executor por handle vivo, solo si hay recognition_timeout (deadline sobre la llamada bloqueante)
        self._executors: Dict[int, ThreadPoolExecutor] = {}
        self._executors_lock = threading.Lock()
        # handle de start()/on_trigger()/stop()
        self._handle: Optional[IAlprEngine] = None

    # ---------------------------------------------------------
    # PREPARE
    # ---------------------------------------------------------
    def prepare(self) -> PrepareResult:
        engine_cfg = self.config.engine
        pool_size = self.config.engine_pool_size
        logger.info(
            "Creando %d instancia(s) de Alpr (country=%s, top_n=%d, default_region=%s)",
            pool_size, engine_cfg.country_code, engine_cfg.top_n, engine_cfg.default_region,
        )

        built: List[GuardedEngine] = []
        try:
            for i in range(pool_size):
                built.append(GuardedEngine(self.engine_factory(engine_cfg), name=f"engine-{i}"))
        except Exception as e:
            for h in built:
                try:
                    h.release()
                except Exception:
                    logger.exception("Error liberando %s tras fallo de inicialización", h.name)
            return self._init_failed(e)

        handle: IAlprEngine = built[0] if pool_size == 1 else EnginePool(built)

        if self.config.recognition_timeout is not None:
            with self._executors_lock:
                self._executors[id(handle)] = ThreadPoolExecutor(
                    max_workers=pool_size, thread_name_prefix="alpr-recognize"
                )

        logger.info("✅ Motor ALPR listo (%d handle(s))", pool_size)
        return PrepareResult(handle=handle)

    def _init_failed(self, exc: Exception) -> PrepareResult:
        if isinstance(exc, EngineInitError):
            error = exc
        else:
            error = EngineInitError(f"Error inicializando el motor ALPR: {exc}")
            error.__cause__ = exc
        engine_init_failures_total.inc()
        logger.error("❌ No se pudo inicializar el motor ALPR: %s", error, exc_info=error)
        return PrepareResult(error=error)

    # ---------------------------------------------------------
    # PROCESS (por unit)
    # ---------------------------------------------------------
    def process(self, handle: IAlprEngine, unit: WorkUnit) -> Outcome:
        try:
            image_bytes = self._read_bytes(unit)

            t0 = time.perf_counter()
            result = self._recognize(handle, image_bytes)
            recognition_latency.observe(time.perf_counter() - t0)

            self._log_plates(unit, result)
            outcome = Outcome.success(unit, result)

        except StageError as e:
            logger.error("Error en OpenALPR procesando unit %s: %s", unit.unit_id, e, exc_info=e)
            outcome = Outcome.failure(unit, e)

        except Exception as e:
            logger.exception("Error inesperado procesando unit %s", unit.unit_id)
            error = RecognitionError(f"Error inesperado: {e}")
            error.__cause__ = e
            outcome = Outcome.failure(unit, error)

        self.sink.transfer(unit, outcome.relationship)
        units_routed_total.labels(relationship=outcome.relationship.value).inc()
        return outcome

    def _read_bytes(self, unit: WorkUnit) -> bytes:
        override = self.config.image_source_override
        if override:
            logger.debug("Usando imagen de override %s (se ignoran bytes de %s)", override, unit.unit_id)
            data = read_image_file(override)
        else:
            data = unit.data

        if self.config.validate_image_bytes:
            return ensure_decodable(data)
        if not data:
            raise ImageReadError("Buffer de imagen vacío")
        return data

    def _recognize(self, handle: IAlprEngine, image_bytes: bytes) -> RecognitionResult:
        timeout = self.config.recognition_timeout
        with self._executors_lock:
            executor = self._executors.get(id(handle))

        if timeout is None or executor is None:
            result = handle.recognize(image_bytes)
        else:
            future = executor.submit(handle.recognize, image_bytes)
            try:
                result = future.result(timeout=timeout)
            except FutureTimeoutError as e:
                # el hilo del motor sigue bloqueado; solo se abandona la espera
                future.cancel()
                raise RecognitionTimeoutError(f"recognize superó el deadline de {timeout:.2f}s") from e

        if not isinstance(result, RecognitionResult):
            raise RecognitionError(f"El motor devolvió {type(result).__name__} en vez de RecognitionResult")
        return self._validate_result(result, self.config.engine.top_n)

    @staticmethod
    def _validate_result(result: RecognitionResult, top_n: int) -> RecognitionResult:
        """
        Mismas reglas que parse_alpr_results, para cualquier IAlprEngine:
        tiempo >= 0, texto str, confianza en [0, 100]. Los grupos con más de
        top_n candidatos se recortan (orden del motor) en un resultado nuevo.
        """
        total_ms = result.total_processing_time_ms
        if isinstance(total_ms, bool) or not isinstance(total_ms, Real) or total_ms < 0:
            raise RecognitionError(f"total_processing_time_ms inválido: {total_ms!r}")

        groups = []
        for group in result.plate_groups:
            for c in group.candidates:
                if not isinstance(c.characters, str):
                    raise RecognitionError(f"Texto de placa no es str: {c.characters!r}")
                conf = c.confidence_overall
                if isinstance(conf, bool) or not isinstance(conf, Real) or not 0.0 <= conf <= 100.0:
                    raise RecognitionError(f"Confianza fuera de rango para '{c.characters}': {conf!r}")
            groups.append(PlateGroup(candidates=list(group.candidates[:top_n]), region=group.region))

        return RecognitionResult(plate_groups=groups, total_processing_time_ms=float(total_ms))

    def _log_plates(self, unit: WorkUnit, result: RecognitionResult) -> None:
        for _, plate in result.iter_candidates():
            plates_found_total.inc()
            logger.info(
                "[%s] Placa encontrada: '%s' con confianza de %.2f%% en %.2f ms",
                unit.unit_id, plate.characters, plate.confidence_overall,
                result.total_processing_time_ms,
            )
        if not result.plate_groups:
            logger.debug("[%s] Sin placas (%.2f ms)", unit.unit_id, result.total_processing_time_ms)
        elif logger.isEnabledFor(logging.DEBUG):
            logger.debug("[%s] Resultado: %s", unit.unit_id, json.dumps(result.to_dict(), ensure_ascii=False))

    # ---------------------------------------------------------
    # RELEASE
    # ---------------------------------------------------------
    def release(self, handle: IAlprEngine) -> None:
        # Gap conocido: tras un RecognitionTimeoutError la llamada colgada sigue
        # con el lock del GuardedEngine; release() espera a que el motor vuelva
        # (nunca se descarga a mitad de recognize), así que un motor colgado
        # también cuelga el cierre de la activación.
        with self._executors_lock:
            executor = self._executors.pop(id(handle), None)
        try:
            handle.release()
            logger.info("Memoria del motor ALPR liberada")
        finally:
            if executor is not None:
                executor.shutdown(wait=False, cancel_futures=True)

    @contextmanager
    def activation(self) -> Iterator[IAlprEngine]:
        """
        with stage.activation() as handle: ...
        Lanza EngineInitError si prepare falló (no se procesa ningún unit).
        """
        prepared = self.prepare()
        if not prepared.ok:
            raise prepared.error
        try:
            yield prepared.handle
        finally:
            self.release(prepared.handle)

    # ---------------------------------------------------------
    # START / TRIGGER / STOP (para hosts que no guardan el handle)
    # ---------------------------------------------------------
    def start(self) -> PrepareResult:
        if self._handle is not None:
            raise RuntimeError("La etapa ya está activa")
        prepared = self.prepare()
        self._handle = prepared.handle
        return prepared

    def on_trigger(self, unit: WorkUnit) -> Outcome:
        if self._handle is None:
            raise RuntimeError("La etapa no está activa (start() no se llamó o falló)")
        return self.process(self._handle, unit)

    def stop(self) -> None:
        if self._handle is None:
            return
        handle, self._handle = self._handle, None
        self.release(handle)
