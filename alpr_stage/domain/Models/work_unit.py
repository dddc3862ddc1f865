from dataclasses import dataclass, field
from typing import Dict


@dataclass(frozen=True)
class WorkUnit:
    """
    Un unit de imagen entrante + token de identidad que usa el host para rutear.
    La etapa nunca lo modifica ni lo guarda más allá de una llamada a process.
    """
    unit_id: str                 # token de identidad (nombre de archivo, uuid, ...)
    data: bytes                  # bytes crudos de la imagen
    attributes: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Versión serializable para logs (sin los bytes)."""
        return {
            "unit_id": self.unit_id,
            "size": len(self.data) if self.data is not None else None,
            "attributes": dict(self.attributes),
        }
