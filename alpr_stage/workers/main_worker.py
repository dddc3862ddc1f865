import sys
import logging
import threading
from typing import Optional

from alpr_stage.core.config import settings
from alpr_stage.application.recognition_stage import RecognitionStage
from alpr_stage.application.stage_runner import run_units
from alpr_stage.domain.Models.engine_config import StageConfig
from alpr_stage.domain.errors import ConfigValidationError, EngineInitError
from alpr_stage.infrastructure.Routing.directory_sink import DirectorySink
from alpr_stage.infrastructure.Routing.logging_sink import LoggingSink
from alpr_stage.infrastructure.Source.directory_source import DirectoryWorkSource
from alpr_stage.monitoring.metrics import start_metrics_server

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


def build_stage() -> RecognitionStage:
    config = StageConfig.from_settings(settings)
    if config.image_source_override:
        logger.warning("⚠️ alpr_image_source_override activo: se ignoran los bytes de entrada (solo bench/smoke)")
    sink = DirectorySink(settings.output_dir) if settings.output_dir else LoggingSink()
    return RecognitionStage(config, sink)


def main(stop_event: Optional[threading.Event] = None) -> int:
    """
    Punto de entrada. Códigos de salida: 0 ok, 1 EngineInitError, 2 config inválida.
    Con poll_interval > 0 repite lotes hasta Ctrl+C o hasta que se setee stop_event.
    """
    stop_event = stop_event or threading.Event()

    try:
        stage = build_stage()
    except ConfigValidationError as e:
        logger.error("❌ %s", e)
        return 2

    start_metrics_server(port=settings.prometheus_port)

    extensions = [e.strip() for e in settings.input_extensions.split(",") if e.strip()]
    polling = settings.poll_interval > 0
    source = DirectoryWorkSource(settings.input_dir, extensions=extensions, consume=polling)

    logger.info("🚀 Etapa ALPR iniciada (input=%s, output=%s)", settings.input_dir, settings.output_dir)

    try:
        with stage.activation() as handle:
            while True:
                counts = run_units(stage, handle, source.units(), workers=settings.processing_workers)
                logger.info("Lote procesado: %s", counts)
                if not polling or stop_event.wait(settings.poll_interval):
                    break
    except EngineInitError:
        # ya registrado por prepare(); el reintento es responsabilidad del host
        return 1
    except KeyboardInterrupt:
        logger.info("🧠 Deteniendo…")

    return 0


if __name__ == "__main__":
    sys.exit(main())
