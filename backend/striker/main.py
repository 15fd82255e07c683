from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from striker.api import assessment, bank, game, health, progress
from striker.core.config import get_settings

settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    description="Adaptive math practice engine: seeded question bank, selection and progression",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        settings.frontend_url,
        "http://localhost:5173",  # Vite dev server
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(game.router)
app.include_router(assessment.router)
app.include_router(progress.router)
app.include_router(bank.router)


@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "docs": "/docs",
        "health": "/health",
    }
