from abc import ABC, abstractmethod
from alpr_stage.domain.Models.recognition_result import RecognitionResult

class IAlprEngine(ABC):
    """
    Motor ALPR (caja negra). Un handle NO es seguro para llamadas
    concurrentes a recognize; debe liberarse explícitamente.
    """
    @abstractmethod
    def recognize(self, image_bytes: bytes) -> RecognitionResult:
        """Reconoce placas en la imagen. Bloqueante."""
        pass

    @abstractmethod
    def release(self) -> None:
        """Libera toda la memoria/recursos retenidos por el motor."""
        pass
