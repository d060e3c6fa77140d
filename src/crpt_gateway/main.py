from contextlib import asynccontextmanager

from fastapi import FastAPI

from crpt_gateway.api.documents import router as documents_router
from crpt_gateway.api.health import router as health_router
from crpt_gateway.core.logging import configure_logging
from crpt_gateway.services.submission_gateway import shutdown_gateway

configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    shutdown_gateway()


app = FastAPI(
    title="CRPT Document Gateway",
    version="0.1.0",
    description="Rate-limited gateway for submitting documents to the CRPT (Chestny ZNAK) API.",
    lifespan=lifespan,
)
app.include_router(health_router)
app.include_router(documents_router)
