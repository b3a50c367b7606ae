"""FastAPI application entrypoint for docsync service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, List, Optional, Tuple

from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import ConfigError, DocSyncContext
from ..errors import CorruptSnapshotError, CorruptStoreError, DocSyncError, LockedError
from ..models import BatchReport
from ..orchestrator import Orchestrator


class GenerateRequest(BaseModel):
    path: str
    files: List[str] = []
    all: bool = False
    diff_base: Optional[str] = None


class FileResult(BaseModel):
    path: str
    status: str
    summary: Optional[str] = None
    reason: Optional[str] = None


class GenerateResponse(BaseModel):
    generated: int
    skipped: int
    failed: int
    results: List[FileResult]


class StaleFile(BaseModel):
    path: str
    state: str


class StatusResponse(BaseModel):
    stale: List[StaleFile]


class DocumentationResponse(BaseModel):
    path: str
    summary: str
    content: str
    type: str
    last_updated: str
    hash: Optional[str] = None


class HealthResponse(BaseModel):
    status: str


OrchestratorFactory = Callable[[str], Orchestrator]


def _default_orchestrator(path: str) -> Orchestrator:
    return Orchestrator(DocSyncContext.for_workspace(path))


def create_app(
    orchestrator_factory: OrchestratorFactory = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing docsync operations."""

    app = FastAPI(title="docsync Service", version="1.0.0")

    async def _run(func: Callable[[], Any]) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func)

    def get_factory() -> OrchestratorFactory:
        return orchestrator_factory

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/generate", response_model=GenerateResponse)
    async def generate(
        payload: GenerateRequest,
        factory: OrchestratorFactory = Depends(get_factory),
    ) -> GenerateResponse:
        def _generate() -> BatchReport:
            orchestrator = factory(payload.path)
            return orchestrator.run_generate(
                diff_base=payload.diff_base,
                all_files=payload.all,
                paths=payload.files or None,
            )

        report: BatchReport = await _run(_generate)
        return GenerateResponse(
            generated=report.generated,
            skipped=report.skipped,
            failed=report.failed,
            results=[FileResult(**result.to_dict()) for result in report.results],
        )

    @app.get("/status", response_model=StatusResponse)
    async def status(
        path: str,
        factory: OrchestratorFactory = Depends(get_factory),
    ) -> StatusResponse:
        def _status() -> List[Tuple[str, str]]:
            return factory(path).stale_files()

        stale = await _run(_status)
        return StatusResponse(stale=[StaleFile(path=item, state=state) for item, state in stale])

    @app.get("/documentation", response_model=DocumentationResponse)
    async def documentation(
        path: str,
        file: str,
        factory: OrchestratorFactory = Depends(get_factory),
    ) -> DocumentationResponse:
        artifact = await _run(lambda: factory(path).documentation_for(file))
        if artifact is None:
            raise HTTPException(status_code=404, detail=f"No documentation for {file}")
        return DocumentationResponse(
            path=artifact.path,
            summary=artifact.summary,
            content=artifact.content,
            type=artifact.type,
            last_updated=artifact.last_updated,
            hash=artifact.hash,
        )

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(
        _: Any, exc: FileNotFoundError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(NotADirectoryError)
    async def not_a_directory_handler(_: Any, exc: NotADirectoryError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(LockedError)
    async def locked_handler(_: Any, exc: LockedError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(DocSyncError)
    async def docsync_error_handler(_: Any, exc: DocSyncError) -> JSONResponse:
        status_code = 500 if isinstance(exc, (CorruptSnapshotError, CorruptStoreError)) else 400
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    @app.exception_handler(ConfigError)
    async def config_error_handler(
        _: Any, exc: ConfigError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app()
    uvicorn.run(app, host=host, port=port)
