from fastapi import FastAPI
from alpr_stage.core.config import settings
from alpr_stage.domain.Models.outcome import Relationship

app = FastAPI(title=settings.app_name)

@app.get("/health")
def health_check():
    return {
        "status": "ok",
        "env": settings.app_env,
        "engine": settings.alpr_engine,
        "country_code": settings.alpr_country_code,
        "relationships": [r.value for r in Relationship],
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("alpr_stage.api.main:app", host="0.0.0.0", port=settings.app_port)
