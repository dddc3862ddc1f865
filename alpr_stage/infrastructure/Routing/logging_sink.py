import json
import logging
from alpr_stage.domain.Interfaces.relationship_sink import IRelationshipSink
from alpr_stage.domain.Models.outcome import Relationship
from alpr_stage.domain.Models.work_unit import WorkUnit

logger = logging.getLogger(__name__)

class LoggingSink(IRelationshipSink):
    """
    Sink que solo registra la decisión de ruteo (sin persistir el unit).
    """

    def transfer(self, unit: WorkUnit, relationship: Relationship) -> None:
        output = {"relationship": relationship.value, **unit.to_dict()}
        logger.info("📢 Ruteando unit: %s", json.dumps(output, ensure_ascii=False))
