from abc import ABC, abstractmethod
from alpr_stage.domain.Models.work_unit import WorkUnit
from alpr_stage.domain.Models.outcome import Relationship

class IRelationshipSink(ABC):
    """
    Destino de ruteo del host (success / failure).
    """
    @abstractmethod
    def transfer(self, unit: WorkUnit, relationship: Relationship) -> None:
        """Entrega el unit, sin modificar, a la relación indicada."""
        pass
