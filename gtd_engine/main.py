import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gtd_engine.api.router import api_router
from gtd_engine.config import settings
from gtd_engine.middleware.logging import RequestLoggingMiddleware

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)-8s %(name)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Starting GTD declaration engine (env=%s, vat=%.1f%%, fee=%.2f%%)",
        settings.environment, settings.vat_rate, settings.customs_fee_rate,
    )
    yield
    logger.info("Shutting down GTD declaration engine")


app = FastAPI(
    title="GTD Declaration Engine",
    description="Rule engine for Uzbekistan cargo customs declarations: regimes, payments and document autofill",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)

app.include_router(api_router, prefix="/api")
