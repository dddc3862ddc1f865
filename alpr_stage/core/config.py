import os
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from dotenv import load_dotenv


# ==========================================================
# 1) Cargar .env raíz
# ==========================================================
load_dotenv(".env")
DEPLOY_ENV = os.getenv("DEPLOY_ENV", "prod").lower()

# ==========================================================
# 2) Cargar .env del entorno
# ==========================================================
ENV_PATH = f"DevOps/{DEPLOY_ENV}/.env"
load_dotenv(ENV_PATH, override=True)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=ENV_PATH,
        extra="allow"
    )

    # =========================
    #  App
    # =========================
    deploy_env: str = Field("prod")
    app_name: str = Field("alpr-stage")
    app_env: str = Field("prod")
    app_port: int = Field(8000)
    log_level: str = Field("INFO")

    # =========================
    #  Motor ALPR
    # =========================
    # "openalpr" (binding nativo) o "dummy" (pruebas / smoke sin libopenalpr)
    alpr_engine: str = Field("openalpr")
    alpr_country_code: str = Field("us")
    alpr_config_path: str = Field("/etc/openalpr/openalpr.conf")
    alpr_runtime_data_path: str = Field("/usr/share/openalpr/runtime_data")
    alpr_top_n: int = Field(10)
    alpr_default_region: str = Field("ga")
    alpr_dummy_plate: str = Field("FAKE123")

    # Solo para bench / smoke: ignora los bytes del work unit y lee esta imagen
    alpr_image_source_override: Optional[str] = Field(None)

    # =========================
    #  Runtime
    # =========================
    recognition_timeout: Optional[float] = Field(None)
    engine_pool_size: int = Field(1)
    validate_image_bytes: bool = Field(True)
    processing_workers: int = Field(1)

    # =========================
    #  Host (directorios)
    # =========================
    input_dir: str = Field("./data/input")
    output_dir: Optional[str] = Field("./data/output")
    input_extensions: str = Field(".jpg,.jpeg,.png,.bmp")
    poll_interval: float = Field(0.0)

    # =========================
    #  Monitoring
    # =========================
    prometheus_port: int = Field(9100)


settings = Settings()
