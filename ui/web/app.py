"""
Web Application - FastAPI application setup
==========================================

Builds the FastAPI app that serves the chat page and the JSON API.
The responder is shared by all requests through ``app.state``.
"""

from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.templating import Jinja2Templates
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from core.config import Config, load_config
from core.logging import setup_logging, get_logger
from services.responder import Responder, create_responder

logger = get_logger("web.app")

TEMPLATES_DIR = Path(__file__).parent / "templates"


def create_app(
    config: Optional[Config] = None,
    responder: Optional[Responder] = None,
    debug: bool = False
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        config: Application configuration (loaded when omitted)
        responder: Responder to serve; built from config when omitted
        debug: Include exception text in 500 responses

    Returns:
        FastAPI application
    """
    config = config or load_config()
    debug = debug or config.debug

    setup_logging(
        log_dir=config.logging.log_dir or None,
        log_level="DEBUG" if debug else config.logging.level,
        json_format=config.logging.json_format,
    )

    app = FastAPI(
        title=config.app_name,
        description="Chat with a rule-based ELIZA responder",
        version="1.0.0",
        debug=debug,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    app.state.config = config
    app.state.responder = responder or create_responder(config)
    app.state.templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

    from .routes import router
    app.include_router(router)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": str(exc) if debug else "Internal server error"},
        )

    logger.info(f"Web application ready with {len(app.state.responder.table)} rules")
    return app


def run_app(
    host: str = "127.0.0.1",
    port: int = 8080,
    debug: bool = False,
    config: Optional[Config] = None,
    responder: Optional[Responder] = None
) -> None:
    """Serve the web application with uvicorn."""
    import uvicorn

    app = create_app(config=config, responder=responder, debug=debug)

    logger.info(f"Starting web server on http://{host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level="debug" if debug else "info")
