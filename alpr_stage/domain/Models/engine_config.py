# alpr_stage/domain/Models/engine_config.py
from typing import Optional, Any
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from alpr_stage.domain.errors import ConfigValidationError


def _validated(model_cls, values: dict):
    try:
        return model_cls(**values)
    except ValidationError as e:
        # Un solo mensaje legible con todos los campos rechazados
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigValidationError(f"Configuración inválida: {problems}") from e


class EngineConfig(BaseModel):
    """
    Configuración del motor ALPR. Inmutable; se valida una sola vez por activación.
    """
    model_config = ConfigDict(frozen=True)

    country_code: str = Field(..., min_length=1)        # "us", "eu", ...
    config_path: str = Field(..., min_length=1)         # openalpr.conf
    runtime_data_path: str = Field(..., min_length=1)   # modelos / runtime_data
    top_n: int = Field(..., ge=0)                       # máx candidatos por región
    default_region: str = Field(..., min_length=1)      # solo aplica a países con regiones (ej. "us")

    @classmethod
    def create(cls, **values: Any) -> "EngineConfig":
        """Construye y valida; los errores salen como ConfigValidationError."""
        return _validated(cls, values)


class StageConfig(BaseModel):
    """
    Superficie de configuración de la etapa: motor + ajustes de runtime.

    image_source_override es un escape SOLO para bench/smoke: si está presente,
    los bytes del work unit se ignoran y la imagen se lee de esa ruta.
    """
    model_config = ConfigDict(frozen=True)

    engine: EngineConfig
    image_source_override: Optional[str] = Field(None, min_length=1)
    recognition_timeout: Optional[float] = Field(None, gt=0)   # None = bloquea indefinidamente
    engine_pool_size: int = Field(1, ge=1)
    validate_image_bytes: bool = True

    @classmethod
    def create(cls, **values: Any) -> "StageConfig":
        return _validated(cls, values)

    @classmethod
    def from_settings(cls, settings) -> "StageConfig":
        """Convierte los Settings planos (env / .env) a una StageConfig validada."""
        engine = EngineConfig.create(
            country_code=settings.alpr_country_code,
            config_path=settings.alpr_config_path,
            runtime_data_path=settings.alpr_runtime_data_path,
            top_n=settings.alpr_top_n,
            default_region=settings.alpr_default_region,
        )
        return cls.create(
            engine=engine,
            # una variable vacía en .env equivale a "sin override"
            image_source_override=settings.alpr_image_source_override or None,
            recognition_timeout=settings.recognition_timeout,
            engine_pool_size=settings.engine_pool_size,
            validate_image_bytes=settings.validate_image_bytes,
        )
