import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from supplyvault.database.db import engine, Base
from supplyvault.models import models  # noqa: F401  registers tables on Base.metadata
from supplyvault.routes import health, alerts, certifications, cron
from supplyvault.core.config import settings
from supplyvault.services.cron_scheduler import start_scheduler


logging.basicConfig(
    level=getattr(logging, str(settings.LOG_LEVEL).upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s"
)

app = FastAPI(
    title=settings.APP_NAME,
    description="Supplier certification compliance backend: verification, expiry alerts and re-verification jobs",
    version="1.0.0"
)

# CORS Configuration - Allow all origins for development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include Routers
# Health check is included at the root for easy access
app.include_router(health.router)

# Scheduler trigger endpoints
app.include_router(cron.router, prefix="/api", tags=["cron"])

# V1 API Routes
app.include_router(certifications.router, prefix="/api/v1", tags=["certifications"])
app.include_router(alerts.router, prefix="/api/v1", tags=["alerts"])


@app.on_event("startup")
def start_background_tasks():
    Base.metadata.create_all(bind=engine)
    start_scheduler()


if __name__ == "__main__":
    import uvicorn
    # The run command recommended: uvicorn supplyvault.main:app --reload --host 0.0.0.0 --port 8000
    uvicorn.run("supplyvault.main:app", host="0.0.0.0", port=settings.PORT, reload=True)
