import logging
from prometheus_client import Counter, Histogram, start_http_server

logger = logging.getLogger(__name__)

# Units ruteados por relación (success / failure)
units_routed_total = Counter(
    "alpr_units_routed_total",
    "Total de work units ruteados",
    ["relationship"]
)

# Candidatos de placa reportados por el motor
plates_found_total = Counter(
    "alpr_plates_found_total",
    "Total de candidatos de placa encontrados"
)

# Latencia del motor (lado cliente)
recognition_latency = Histogram(
    "alpr_recognition_latency_seconds",
    "Tiempo de la llamada recognize por unit"
)

# Fallos al construir el motor
engine_init_failures_total = Counter(
    "alpr_engine_init_failures_total",
    "Activaciones abortadas por EngineInitError"
)

def start_metrics_server(port: int = 9100):
    """Arranca servidor de métricas Prometheus."""
    start_http_server(port)
    logger.info("📊 Prometheus metrics disponible en :%d", port)
