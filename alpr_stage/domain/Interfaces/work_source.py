from abc import ABC, abstractmethod
from typing import Iterator
from alpr_stage.domain.Models.work_unit import WorkUnit

class IWorkSource(ABC):
    """
    Origen de work units del host.
    """
    @abstractmethod
    def units(self) -> Iterator[WorkUnit]:
        """Itera los units pendientes."""
        pass
