"""
FastAPI application entry point for the vault backend.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from vault.config import get_settings
from vault.errors import VaultError
from vault.routes import STATUS_BY_KIND, router


async def _vault_error_handler(request: Request, exc: VaultError) -> JSONResponse:
    return JSONResponse(
        status_code=STATUS_BY_KIND[exc.kind],
        content={"detail": {"kind": exc.kind.value, "message": exc.message}},
    )


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Creative Vault Backend (FastAPI)", version="0.1.0")
    app.include_router(router, prefix=settings.api_prefix)
    app.add_exception_handler(VaultError, _vault_error_handler)
    return app


app = create_app()
