import os
import logging
from typing import Dict

from alpr_stage.domain.Interfaces.relationship_sink import IRelationshipSink
from alpr_stage.domain.Models.outcome import Relationship
from alpr_stage.domain.Models.work_unit import WorkUnit

logger = logging.getLogger(__name__)


class DirectorySink(IRelationshipSink):
    """
    Escribe cada unit, sin modificar, en <output_dir>/success o <output_dir>/failure.
    El nombre de archivo es el unit_id.
    """

    def __init__(self, output_dir: str):
        self.output_dir = output_dir
        self.dirs: Dict[Relationship, str] = {
            rel: os.path.join(output_dir, rel.value) for rel in Relationship
        }
        for d in self.dirs.values():
            os.makedirs(d, exist_ok=True)

    def transfer(self, unit: WorkUnit, relationship: Relationship) -> None:
        target = os.path.join(self.dirs[relationship], os.path.basename(unit.unit_id))
        with open(target, "wb") as f:
            f.write(unit.data)
        logger.debug("Unit %s -> %s", unit.unit_id, target)
