"""FastAPI application exposing declaration generation over HTTP."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..assembler import DeclarationNames, generate_declaration
from ..codec import descriptor_from_dict
from ..config import NamesConfig
from ..errors import ConfigError, TranslationError
from ..logging import get_logger
from ..models import ModuleDescriptor

Generator = Callable[[ModuleDescriptor, DeclarationNames], str]

logger = get_logger("service")


class NamesPayload(BaseModel):
    message: Optional[str] = None
    flags: Optional[str] = None
    app: Optional[str] = None
    root: Optional[str] = None


class DeclarationRequest(BaseModel):
    descriptor: Dict[str, Any]
    names: Optional[NamesPayload] = None


class DeclarationResponse(BaseModel):
    module: str
    declaration: str


class HealthResponse(BaseModel):
    status: str


def _default_generator(descriptor: ModuleDescriptor, names: DeclarationNames) -> str:
    return generate_declaration(descriptor, names)


def create_app(generator: Generator = _default_generator) -> FastAPI:
    """Create the FastAPI application exposing portgen operations."""

    app = FastAPI(title="portgen", version="1.0.0")

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/declarations", response_model=DeclarationResponse)
    async def declarations(payload: DeclarationRequest) -> DeclarationResponse:
        names = _resolve_names(payload.names)
        descriptor = descriptor_from_dict(payload.descriptor)
        logger.debug("Generating declarations for %s", descriptor.module_name)
        text = generator(descriptor, names)
        return DeclarationResponse(module=descriptor.module_name, declaration=text)

    @app.exception_handler(TranslationError)
    async def translation_error_handler(_: Request, exc: TranslationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"detail": exc.detail, "path": list(exc.path), "error": type(exc).__name__},
        )

    @app.exception_handler(ConfigError)
    async def config_error_handler(_: Request, exc: ConfigError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def _resolve_names(payload: NamesPayload | None) -> DeclarationNames:
    if payload is None:
        return DeclarationNames()
    return NamesConfig(**payload.model_dump()).to_declaration_names()


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    uvicorn.run(create_app(), host=host, port=port)


__all__: List[str] = ["DeclarationRequest", "DeclarationResponse", "create_app", "run_service"]
