"""Main entrypoint for the Compute Market ledger API."""

import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from compute_market import __version__, config

from . import auth, consumers, jobs, providers
from .database import init_db
from .errors import register_error_handlers
from .metrics import setup_metrics

# Configure Rich console and logging
console = Console()
logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True)],
)
log = logging.getLogger("ledger_api")

app = FastAPI(
    title="Compute Market Ledger API",
    description="Ledger for trading compute capacity between providers and consumers",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)
setup_metrics(app)

app.include_router(auth.router, prefix="/auth", tags=["auth"])
app.include_router(providers.router, prefix="/providers", tags=["providers"])
app.include_router(consumers.router, prefix="/consumers", tags=["consumers"])
app.include_router(jobs.router, prefix="/jobs", tags=["jobs"])


@app.get("/health")
def health_check():
    return {"status": "healthy"}


@app.on_event("startup")
async def startup_event():
    """Create tables and announce the service."""
    init_db()
    console.print(Panel.fit(
        f"[bold green]Ledger API for the compute marketplace[/bold green]\n"
        f"environment: {config.ENVIRONMENT}",
        title=f"[bold yellow]Compute Market v{__version__}[/bold yellow]",
        border_style="green",
    ))
    log.info("Starting up the API server")


@app.on_event("shutdown")
async def shutdown_event():
    log.info("Shutting down the API server")


def run() -> None:
    """Serve the API with uvicorn on API_HOST:API_PORT."""
    uvicorn.run(app, host=config.API_HOST, port=config.API_PORT)


if __name__ == "__main__":
    run()
