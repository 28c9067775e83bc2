"""
TechMate Maintenance Core - interventions, voice intake and AI repair suggestions
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from techmate.core.config import settings
from techmate.core.logging import setup_logging
from techmate.api.v1 import intake, interventions, machines, dashboard, functions, profiles
from techmate.services.ai_client import close_ai_client
from techmate.services.transcription_client import close_transcription_client

setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_ai_client()
    await close_transcription_client()


app = FastAPI(
    title="TechMate Maintenance Core API",
    description="System of record for industrial maintenance interventions",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(intake.router, prefix="/v1/intake", tags=["intake"])
app.include_router(interventions.router, prefix="/v1/interventions", tags=["interventions"])
app.include_router(machines.router, prefix="/v1", tags=["machines"])
app.include_router(dashboard.router, prefix="/v1/dashboard", tags=["dashboard"])
app.include_router(functions.router, prefix="/v1/functions", tags=["functions"])
app.include_router(profiles.router, prefix="/v1/profiles", tags=["profiles"])


@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": settings.APP_NAME}


@app.get("/")
async def root():
    return {
        "service": settings.APP_NAME,
        "version": "1.0.0",
        "docs": "/docs"
    }
