"""
FastAPI application factory.

Build and configure the ASGI app; mount the proof routers.
Run with: uvicorn proof_of_riches.api.app:create_app --factory --port 3001
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..config import Settings
from ..exceptions import ProofOfRichesError
from ..network import Web3Factory
from ..prover import ProverClient
from ..store import ProofStore
from ..version import __version__
from .balance_proof import router as balance_proof_router
from .proofs import router as proofs_router
from .services import ProofServices, build_services

logger = logging.getLogger(__name__)

# Public wording for server-side failures; the raw detail only goes out in development
_PUBLIC_5XX_ERRORS = {
    500: "Failed to process request. Please try again.",
    503: "Service is not configured",
}


def iso_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def error_body(error: str, message: Optional[str], settings: Settings) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": False, "error": error}
    if message and not settings.is_production:
        body["message"] = message
    return body


def create_app(
    settings: Optional[Settings] = None,
    services: Optional[ProofServices] = None,
    web3_factory: Optional[Web3Factory] = None,
    prover: Optional[ProverClient] = None,
    store: Optional[ProofStore] = None
) -> FastAPI:
    """
    Create the API application

    Args:
        settings: Settings to use (default: read from the environment)
        services: Fully built service graph; overrides the other arguments
        web3_factory: Optional Web3 handle factory
        prover: Optional prover client
        store: Optional proof store

    Returns:
        Configured FastAPI application
    """
    if services is None:
        settings = settings or Settings.from_env()
        services = build_services(settings, web3_factory=web3_factory, prover=prover, store=store)
    settings = services.settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            f"Proof service starting (env={settings.environment}, network={settings.network_name}, "
            f"prover={services.prover.mode.value})"
        )
        yield
        services.prover.close()
        logger.info("Proof service stopped")

    app = FastAPI(
        title="Proof of Riches API",
        description="Paid, shareable proofs that a wallet holds at least a threshold of a token.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.services = services

    app.include_router(proofs_router, prefix="/api/proofs", tags=["Proofs"])
    app.include_router(balance_proof_router, prefix="/api/balance-proof", tags=["Balance Proof"])

    @app.exception_handler(ProofOfRichesError)
    def handle_proof_error(request: Request, exc: ProofOfRichesError):
        status = exc.http_status
        if status >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}")
            error = _PUBLIC_5XX_ERRORS.get(status, _PUBLIC_5XX_ERRORS[500])
            return JSONResponse(status_code=status, content=error_body(error, str(exc), settings))
        logger.info(f"{request.method} {request.url.path} rejected ({status}): {exc}")
        return JSONResponse(status_code=status, content=error_body(str(exc), None, settings))

    @app.exception_handler(RequestValidationError)
    def handle_validation_error(request: Request, exc: RequestValidationError):
        detail = "; ".join(
            f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}"
            for err in exc.errors()
        )
        logger.info(f"{request.method} {request.url.path} invalid body: {detail}")
        return JSONResponse(status_code=400, content=error_body("Invalid request body", detail, settings))

    @app.exception_handler(StarletteHTTPException)
    def handle_http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return JSONResponse(
                status_code=404,
                content={"success": False, "error": "Not Found", "message": f"Route {request.url.path} not found"},
            )
        return JSONResponse(status_code=exc.status_code, content={"success": False, "error": str(exc.detail)})

    @app.get("/")
    def root():
        return {
            "message": "Proof of Riches API",
            "version": __version__,
            "status": "running",
            "endpoints": {
                "proofs": "/api/proofs",
                "balanceProof": "/api/balance-proof",
                "health": "/health",
            },
            "timestamp": iso_now(),
        }

    @app.get("/health")
    def health():
        return {"status": "OK", "timestamp": iso_now(), "environment": settings.environment}

    return app
