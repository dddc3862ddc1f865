# alpr_stage/domain/Models/recognition_result.py
from dataclasses import dataclass, field
from typing import List, Optional, Iterator, Tuple


@dataclass
class PlateCandidate:
    """
    Un candidato de texto para una región de placa.
    """
    characters: str              # texto de la placa
    confidence_overall: float    # 0..100, tal como lo reporta el motor
    matches_template: bool = False

    def to_dict(self) -> dict:
        return {
            "characters": self.characters,
            "confidence": self.confidence_overall,
            "matches_template": self.matches_template,
        }


@dataclass
class PlateGroup:
    """
    Una región de placa detectada, con candidatos ordenados por confianza (motor).
    """
    candidates: List[PlateCandidate] = field(default_factory=list)
    region: Optional[str] = None

    @property
    def best(self) -> Optional[PlateCandidate]:
        return self.candidates[0] if self.candidates else None


@dataclass
class RecognitionResult:
    """
    Resultado de reconocer un work unit. plate_groups conserva el orden del motor.
    """
    plate_groups: List[PlateGroup]
    total_processing_time_ms: float

    def iter_candidates(self) -> Iterator[Tuple[int, PlateCandidate]]:
        """(índice de grupo, candidato) en orden de motor."""
        for idx, group in enumerate(self.plate_groups):
            for candidate in group.candidates:
                yield idx, candidate

    @property
    def candidate_count(self) -> int:
        return sum(len(g.candidates) for g in self.plate_groups)

    def to_dict(self) -> dict:
        return {
            "total_processing_time_ms": self.total_processing_time_ms,
            "plates": [
                {"region": g.region, "candidates": [c.to_dict() for c in g.candidates]}
                for g in self.plate_groups
            ],
        }
