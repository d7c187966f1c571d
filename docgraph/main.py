import os
import subprocess
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from docgraph.api.chat.router import router as chat_router
from docgraph.api.dependencies import build_services
from docgraph.api.documents.router import router as documents_router
from docgraph.api.errors import register_error_handlers
from docgraph.api.graph.router import router as graph_router
from docgraph.api.query.router import router as query_router
from docgraph.config.logger import app_logger, log_request_end, log_request_error, log_request_start
from docgraph.config.settings import settings
from docgraph.db.db import Database
from docgraph.db.graph import GraphStore
from docgraph.utils.errors import UpstreamError

_git_sha_cache: Optional[str] = None


def get_git_sha() -> str:
    """Get the current Git commit SHA (cached to avoid blocking)."""
    global _git_sha_cache
    if _git_sha_cache is not None:
        return _git_sha_cache

    try:
        result = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            capture_output=True,
            text=True,
            check=True,
            timeout=1.0,
        )
        _git_sha_cache = result.stdout.strip()[:8]
        return _git_sha_cache
    except (subprocess.CalledProcessError, FileNotFoundError, subprocess.TimeoutExpired):
        _git_sha_cache = "local-dev"
        return _git_sha_cache


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the store handles and services; dispose them on shutdown."""
    app_logger.info(f"{settings.APP_NAME} API starting up")

    database = Database()
    try:
        await database.init()
    except (SQLAlchemyError, OSError) as e:
        app_logger.error(f"Failed to initialize database: {e}")
        app_logger.warning("Database unavailable - document and chat endpoints will fail until it is reachable")

    graph_store = GraphStore()
    try:
        await graph_store.ensure_schema()
    except UpstreamError as e:
        app_logger.warning(f"Neo4j schema setup skipped: {e}")

    app.state.database = database
    app.state.graph_store = graph_store
    app.state.services = build_services(database, graph_store)
    app_logger.info("Application initialized successfully")

    yield

    app_logger.info(f"{settings.APP_NAME} API shutting down")
    await graph_store.close()
    await database.close()
    app_logger.info("Application shutdown complete")


app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests with timing information using Loguru."""
    start_time = datetime.now()
    log_request_start(request)

    try:
        response = await call_next(request)
        process_time = (datetime.now() - start_time).total_seconds()
        log_request_end(request, response.status_code, process_time)
        return response
    except Exception as e:
        process_time = (datetime.now() - start_time).total_seconds()
        log_request_error(request, e, process_time)
        raise


@app.get("/", tags=["health"])
async def root():
    """Root endpoint with basic API information."""
    return {
        "message": f"Welcome to {settings.APP_NAME} API",
        "version": settings.APP_VERSION,
        "status": "operational",
        "docs": "/docs",
        "redoc": "/redoc",
    }


@app.get("/status", tags=["health"])
async def status():
    """Status endpoint with build information for CI/CD monitoring."""
    build_number = os.getenv("BUILD_NUMBER", "local-dev")
    git_sha = os.getenv("GIT_SHA", os.getenv("GITHUB_SHA", get_git_sha()))
    environment = os.getenv("ENVIRONMENT", os.getenv("ENV", "development"))

    return {
        "status": "ok",
        "build": build_number,
        "sha": git_sha,
        "env": environment,
    }


@app.get("/health/db", tags=["health"])
async def health_db(request: Request):
    """Relational store health: runs SELECT 1."""
    database: Optional[Database] = getattr(request.app.state, "database", None)
    if database is None:
        return JSONResponse(status_code=503, content={"status": "degraded", "db": "unavailable", "message": "Database not initialized"})
    is_ok, message = await database.ping()
    if not is_ok:
        return JSONResponse(status_code=503, content={"status": "degraded", "db": "unavailable", "message": message})
    return {"status": "ok", "db": "available", "message": message}


@app.get("/health/graph", tags=["health"])
async def health_graph(request: Request):
    """Graph store health: verifies Neo4j connectivity."""
    graph_store: Optional[GraphStore] = getattr(request.app.state, "graph_store", None)
    if graph_store is None:
        return JSONResponse(status_code=503, content={"status": "degraded", "graph": "unavailable", "message": "Graph store not initialized"})
    is_ok, message = await graph_store.verify_connectivity()
    if not is_ok:
        return JSONResponse(status_code=503, content={"status": "degraded", "graph": "unavailable", "message": message})
    return {"status": "ok", "graph": "available", "message": message}


app.include_router(documents_router)
app.include_router(query_router)
app.include_router(chat_router)
app.include_router(graph_router)


if __name__ == "__main__":
    import uvicorn

    app_logger.info(f"Starting {settings.APP_NAME} API server")

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        log_config=None,
    )
