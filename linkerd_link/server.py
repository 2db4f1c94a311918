"""
FastAPI request/response adapter for the provider verbs.

Philosophy:
- Thin transport: every route decodes an envelope and calls one verb
- No per-resource state in the adapter
- Provider errors rendered as structured JSON

Endpoints:
    GET  /health
    POST /v1/check, /v1/diff, /v1/create, /v1/read, /v1/update, /v1/delete
    POST /v1/check-config, /v1/diff-config, /v1/configure, /v1/cancel
    POST /v1/get-schema, /v1/get-plugin-info
"""

import logging
from typing import Dict, Optional

from fastapi import APIRouter, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .exceptions import (
    LinkProviderError,
    NormalizationError,
    TransportError,
    ValidationError,
)
from .models import (
    CheckRequest,
    CheckResponse,
    ConfigureRequest,
    CreateRequest,
    CreateResponse,
    DeleteRequest,
    DiffRequest,
    DiffResponse,
    Empty,
    ErrorBody,
    PluginInfo,
    ReadRequest,
    ReadResponse,
    SchemaResponse,
    UpdateRequest,
    UpdateResponse,
)
from .provider import LinkProvider
from .version import __version__

logger = logging.getLogger(__name__)


def _error_response(status_code: int, exc: LinkProviderError) -> JSONResponse:
    body = ErrorBody(code=exc.error_code, message=exc.message, details=exc.to_dict())
    return JSONResponse(status_code=status_code, content={"error": body.model_dump()})


def _build_router(provider: LinkProvider) -> APIRouter:
    router = APIRouter()

    @router.post("/check", response_model=CheckResponse)
    async def check(req: CheckRequest) -> CheckResponse:
        return await provider.check(req)

    @router.post("/diff", response_model=DiffResponse)
    async def diff(req: DiffRequest) -> DiffResponse:
        return await provider.diff(req)

    @router.post("/create", response_model=CreateResponse)
    async def create(req: CreateRequest) -> CreateResponse:
        return await provider.create(req)

    @router.post("/read", response_model=ReadResponse)
    async def read(req: ReadRequest) -> ReadResponse:
        return await provider.read(req)

    @router.post("/update", response_model=UpdateResponse)
    async def update(req: UpdateRequest) -> UpdateResponse:
        return await provider.update(req)

    @router.post("/delete", response_model=Empty)
    async def delete(req: DeleteRequest) -> Empty:
        return await provider.delete(req)

    @router.post("/check-config", response_model=CheckResponse)
    async def check_config(req: CheckRequest) -> CheckResponse:
        return await provider.check_config(req)

    @router.post("/diff-config", response_model=DiffResponse)
    async def diff_config(req: DiffRequest) -> DiffResponse:
        return await provider.diff_config(req)

    @router.post("/configure", response_model=Empty)
    async def configure(req: ConfigureRequest) -> Empty:
        return await provider.configure(req)

    @router.post("/cancel", response_model=Empty)
    async def cancel() -> Empty:
        return await provider.cancel()

    @router.post("/get-schema", response_model=SchemaResponse)
    async def get_schema() -> SchemaResponse:
        return await provider.get_schema()

    @router.post("/get-plugin-info", response_model=PluginInfo)
    async def get_plugin_info() -> PluginInfo:
        return await provider.get_plugin_info()

    return router


def create_app(provider: Optional[LinkProvider] = None) -> FastAPI:
    """Build the transport app around ``provider``."""
    provider = provider or LinkProvider()
    app = FastAPI(
        title="linkerd-link provider",
        version=__version__,
        description="Resource lifecycle verbs for linkerd multicluster links",
    )

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        """Invalid resource input: 400, nothing was run."""
        return _error_response(status.HTTP_400_BAD_REQUEST, exc)

    @app.exception_handler(NormalizationError)
    async def normalization_error_handler(request: Request, exc: NormalizationError):
        return _error_response(status.HTTP_400_BAD_REQUEST, exc)

    @app.exception_handler(TransportError)
    async def transport_error_handler(request: Request, exc: TransportError):
        return _error_response(422, exc)

    @app.exception_handler(LinkProviderError)
    async def provider_error_handler(request: Request, exc: LinkProviderError):
        """Operation failures (tool exits, timeouts, partial updates): 500."""
        logger.error(f"Operation failed: {exc}")
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(
        request: Request, exc: RequestValidationError
    ):
        """Malformed envelope: 422 with the first offending field."""
        errors = exc.errors()
        first_error = errors[0] if errors else {}
        field = ".".join(str(loc) for loc in first_error.get("loc", []))
        message = first_error.get("msg", "Validation error")
        return JSONResponse(
            status_code=422,
            content={
                "error": {
                    "code": "TRANSPORT_ERROR",
                    "message": f"Invalid {field}: {message}",
                    "details": {},
                }
            },
        )

    @app.get("/health")
    async def health() -> Dict[str, str]:
        return {"status": "healthy", "version": __version__}

    app.include_router(_build_router(provider), prefix="/v1")
    return app


__all__ = ["create_app"]
