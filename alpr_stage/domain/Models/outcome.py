# alpr_stage/domain/Models/outcome.py
from dataclasses import dataclass
from enum import Enum
from typing import Optional, TYPE_CHECKING

from alpr_stage.domain.Models.work_unit import WorkUnit
from alpr_stage.domain.Models.recognition_result import RecognitionResult
from alpr_stage.domain.errors import StageError, EngineInitError

if TYPE_CHECKING:
    from alpr_stage.domain.Interfaces.alpr_engine import IAlprEngine


class Relationship(str, Enum):
    """Salidas de la etapa."""
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class Outcome:
    """
    Resultado de process(): a qué relación fue el unit y por qué.
    Exactamente uno de result / error está presente.
    """
    unit: WorkUnit
    relationship: Relationship
    result: Optional[RecognitionResult] = None
    error: Optional[StageError] = None

    @property
    def succeeded(self) -> bool:
        return self.relationship is Relationship.SUCCESS

    @staticmethod
    def success(unit: WorkUnit, result: RecognitionResult) -> "Outcome":
        return Outcome(unit=unit, relationship=Relationship.SUCCESS, result=result)

    @staticmethod
    def failure(unit: WorkUnit, error: StageError) -> "Outcome":
        return Outcome(unit=unit, relationship=Relationship.FAILURE, error=error)


@dataclass(frozen=True)
class PrepareResult:
    """
    Resultado de prepare(): handle listo o EngineInitError (nunca ambos).
    """
    handle: Optional["IAlprEngine"] = None
    error: Optional[EngineInitError] = None

    @property
    def ok(self) -> bool:
        return self.handle is not None and self.error is None
