from alpr_stage.core.config import settings
from alpr_stage.domain.Interfaces.alpr_engine import IAlprEngine
from alpr_stage.domain.Models.engine_config import EngineConfig
from alpr_stage.domain.errors import EngineInitError

def create_alpr_engine(config: EngineConfig) -> IAlprEngine:
    kind = settings.alpr_engine.lower()
    if kind == "openalpr":
        from alpr_stage.infrastructure.OpenALPR.openalpr_engine import OpenALPREngine
        return OpenALPREngine(config)
    elif kind == "dummy":
        from alpr_stage.infrastructure.OpenALPR.dummy_engine import DummyAlprEngine
        return DummyAlprEngine(config, plate=settings.alpr_dummy_plate)
    raise EngineInitError(f"Motor ALPR desconocido: {settings.alpr_engine!r}")
