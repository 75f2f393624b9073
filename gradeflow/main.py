"""
Gradeflow — Weighted grading & quiz auto-scoring backend
FastAPI entry point.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gradeflow.core.config import settings
from gradeflow.core.logging_config import configure_logging
from gradeflow.routers import submissions, grading, projects, quizzes

configure_logging()

app = FastAPI(
    title=settings.APP_NAME,
    description="Submissions, grade overrides, weights and weighted averages for project-based courses",
    version="1.0.0",
)

# CORS
origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(submissions.router)
app.include_router(grading.router)
app.include_router(projects.router)
app.include_router(quizzes.router)


@app.get("/")
async def root():
    return {
        "name": settings.APP_NAME,
        "version": "1.0.0",
        "status": "running",
        "auth_mode": settings.AUTH_MODE,
    }


@app.get("/api/health")
async def health():
    return {"status": "healthy", "auth_mode": settings.AUTH_MODE}
