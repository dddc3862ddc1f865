# alpr_stage/domain/errors.py


class StageError(Exception):
    """Error base de la etapa de reconocimiento."""


class ConfigValidationError(StageError):
    """
    Configuración mal formada. Se reporta antes de construir el motor;
    la activación no arranca.
    """


class EngineInitError(StageError):
    """
    El motor ALPR no pudo construirse (config inexistente, runtime_data
    inexistente, país/región rechazados, librería nativa no disponible).
    Alcance: toda la activación.
    """


class ImageReadError(StageError):
    """Bytes del work unit (o del override) ilegibles. Alcance: un unit."""


class RecognitionError(StageError):
    """La llamada al motor falló o devolvió datos mal formados. Alcance: un unit."""


class RecognitionTimeoutError(RecognitionError):
    """La llamada al motor superó el deadline configurado."""


class EngineReleasedError(RecognitionError):
    """Uso de un handle después de liberarlo."""
