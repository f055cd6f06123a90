import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .database import init_db
from .logging_config import setup_logging
from .routers import claims_router

logger = logging.getLogger(__name__)

settings = get_settings()

app = FastAPI(title="Lecturer Claim Workflow")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(claims_router)


@app.on_event("startup")
def _startup() -> None:
    setup_logging(settings.log_level)
    init_db()
    logger.info("Claim workflow service started")


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}
