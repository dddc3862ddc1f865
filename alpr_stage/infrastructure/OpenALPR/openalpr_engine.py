import os
import logging
from typing import Any, Callable, Optional

from alpr_stage.domain.Interfaces.alpr_engine import IAlprEngine
from alpr_stage.domain.Models.engine_config import EngineConfig
from alpr_stage.domain.Models.recognition_result import (
    RecognitionResult, PlateGroup, PlateCandidate
)
from alpr_stage.domain.errors import EngineInitError, RecognitionError

logger = logging.getLogger(__name__)


def check_engine_paths(config: EngineConfig) -> None:
    """
    OpenALPR no falla de forma limpia si faltan sus archivos: se verifica antes.
    """
    if not os.path.isfile(config.config_path):
        raise EngineInitError(
            f"No se encontró el archivo de configuración de OpenALPR en {config.config_path}"
        )
    if not os.path.isdir(config.runtime_data_path):
        raise EngineInitError(
            f"No se encontró el directorio runtime_data de OpenALPR en {config.runtime_data_path}"
        )


def parse_alpr_results(payload: Any, top_n: int) -> RecognitionResult:
    """
    Convierte el JSON de OpenALPR a RecognitionResult.

    Formato esperado (recognize_array):
        {"processing_time_ms": float,
         "results": [{"region": str, "candidates": [{"plate": str, "confidence": float,
                                                     "matches_template": int}, ...]}, ...]}

    Cualquier desviación se reporta como RecognitionError (resultado mal formado).
    Los candidatos se recortan a top_n conservando el orden del motor.
    """
    if not isinstance(payload, dict):
        raise RecognitionError(f"Resultado de OpenALPR mal formado: {type(payload).__name__}")

    try:
        total_ms = float(payload["processing_time_ms"])
        raw_results = payload["results"]
    except (KeyError, TypeError, ValueError) as e:
        raise RecognitionError(f"Resultado de OpenALPR mal formado: {e!r}") from e

    if total_ms < 0:
        raise RecognitionError(f"processing_time_ms negativo: {total_ms}")
    if not isinstance(raw_results, list):
        raise RecognitionError("Resultado de OpenALPR mal formado: 'results' no es lista")

    groups = []
    for raw in raw_results:
        try:
            candidates = []
            for c in raw["candidates"]:
                text = c["plate"]
                if not isinstance(text, str):
                    raise TypeError(f"plate no es str: {text!r}")
                confidence = float(c["confidence"])
                if not 0.0 <= confidence <= 100.0:
                    raise ValueError(f"confianza fuera de rango: {confidence}")
                candidates.append(PlateCandidate(
                    characters=text,
                    confidence_overall=confidence,
                    matches_template=bool(c.get("matches_template", 0)),
                ))
            region = raw.get("region") or None
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise RecognitionError(f"Placa mal formada en resultado de OpenALPR: {e!r}") from e

        groups.append(PlateGroup(candidates=candidates[:top_n], region=region))

    return RecognitionResult(plate_groups=groups, total_processing_time_ms=total_ms)


class OpenALPREngine(IAlprEngine):
    """
    Adaptador del binding Python oficial de OpenALPR (paquete 'openalpr').
    - Construye Alpr(country, config, runtime_data) una sola vez.
    - Aplica top_n y default_region desde EngineConfig.
    - recognize() usa recognize_array(bytes) y normaliza la salida a dominio.
    - release() llama unload().
    """

    def __init__(self, config: EngineConfig, alpr_factory: Optional[Callable[..., Any]] = None):
        self.config = config
        check_engine_paths(config)

        if alpr_factory is None:
            try:
                from openalpr import Alpr
            except ImportError as e:
                raise EngineInitError(
                    "Falta dependencia para OpenALPR. Instala:\n"
                    "  pip install openalpr\n"
                    "Tip: requiere libopenalpr instalada en el sistema."
                ) from e
            alpr_factory = Alpr

        logger.info("Creando instancia de Alpr (country=%s, config=%s, runtime=%s)",
                    config.country_code, config.config_path, config.runtime_data_path)
        try:
            self.alpr = alpr_factory(config.country_code, config.config_path, config.runtime_data_path)
        except Exception as e:
            # típicamente OSError: libopenalpr.so no encontrada
            raise EngineInitError(f"No se pudo construir Alpr: {e}") from e

        if not self.alpr.is_loaded():
            self._unload_quietly()
            raise EngineInitError(
                f"OpenALPR no cargó (country={config.country_code}, config={config.config_path})"
            )

        try:
            self.alpr.set_top_n(config.top_n)
            self.alpr.set_default_region(config.default_region)
        except Exception as e:
            self._unload_quietly()
            raise EngineInitError(f"OpenALPR rechazó top_n/default_region: {e}") from e

        logger.info("[OpenALPR] listo: top_n=%d default_region=%s", config.top_n, config.default_region)

    def recognize(self, image_bytes: bytes) -> RecognitionResult:
        try:
            payload = self.alpr.recognize_array(image_bytes)
        except Exception as e:
            raise RecognitionError(f"Error en OpenALPR: {e}") from e
        return parse_alpr_results(payload, self.config.top_n)

    def release(self) -> None:
        self.alpr.unload()
        logger.info("[OpenALPR] memoria del motor liberada")

    def _unload_quietly(self) -> None:
        try:
            self.alpr.unload()
        except Exception:
            logger.debug("unload() falló sobre una instancia no cargada", exc_info=True)
