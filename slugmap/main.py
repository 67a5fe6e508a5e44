from fastapi import FastAPI, UploadFile, File, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response

from .decoding import decode_upload
from .errors import (
    IndexOutOfRange,
    MalformedMarkup,
    NoSitemapLoaded,
    NothingToExport,
    ReconcileError,
    SlugmapError,
)
from .logging_config import configure_logging
from .models import (
    DestinationUpdate,
    HealthResponse,
    RedirectListResponse,
    SitemapResponse,
    SlugListResponse,
)
from .settings import Settings, get_settings
from .workspace import Workspace

_STATUS_BY_ERROR = {
    MalformedMarkup: 422,
    NoSitemapLoaded: 409,
    IndexOutOfRange: 404,
    NothingToExport: 404,
    ReconcileError: 422,
}


def _http_error(exc: SlugmapError) -> HTTPException:
    for error_type, status in _STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            return HTTPException(status_code=status, detail=exc.as_detail())
    return HTTPException(status_code=400, detail=exc.as_detail())


async def _read_upload(request: Request, file: UploadFile, suffix: str) -> str:
    if not (file.filename or "").lower().endswith(suffix):
        raise HTTPException(status_code=422, detail=f"Only {suffix[1:].upper()} files are supported")

    settings: Settings = request.app.state.settings
    raw = await file.read()
    if len(raw) > settings.max_upload_bytes:
        raise HTTPException(status_code=413, detail="Upload too large")
    return await run_in_threadpool(decode_upload, raw)


def _csv_download(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def _redirect_list(workspace: Workspace) -> dict:
    return {"count": len(workspace.records), "redirects": workspace.records}


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="slugmap",
        description="Sitemap slug extraction and redirect table formatting",
        version="0.1.0",
    )
    app.state.settings = settings
    app.state.workspace = Workspace()

    @app.get("/health", response_model=HealthResponse)
    def health():
        return {"ok": True}

    @app.post("/sitemap", response_model=SitemapResponse)
    async def upload_sitemap(request: Request, file: UploadFile = File(...)):
        text = await _read_upload(request, file, ".xml")
        workspace: Workspace = request.app.state.workspace
        try:
            slugs = await run_in_threadpool(workspace.load_sitemap, text)
        except SlugmapError as exc:
            raise _http_error(exc) from exc
        return {
            "count": len(slugs),
            "slugs": slugs,
            "preview": workspace.slug_preview(settings.preview_limit),
        }

    @app.get("/slugs", response_model=SlugListResponse)
    def list_slugs(request: Request):
        slugs = request.app.state.workspace.slugs
        return {"count": len(slugs), "slugs": slugs}

    @app.get("/slugs.csv")
    def download_slugs(request: Request):
        try:
            content = request.app.state.workspace.slugs_csv()
        except SlugmapError as exc:
            raise _http_error(exc) from exc
        return _csv_download(content, settings.slug_export_filename)

    @app.post("/redirects", response_model=RedirectListResponse)
    async def upload_redirects(request: Request, file: UploadFile = File(...)):
        workspace: Workspace = request.app.state.workspace
        if not workspace.slugs:
            raise _http_error(NoSitemapLoaded())
        text = await _read_upload(request, file, ".csv")
        try:
            await run_in_threadpool(workspace.load_redirects, text)
        except SlugmapError as exc:
            raise _http_error(exc) from exc
        return _redirect_list(workspace)

    @app.get("/redirects", response_model=RedirectListResponse)
    def list_redirects(request: Request):
        return _redirect_list(request.app.state.workspace)

    @app.post("/redirects/bulk", response_model=RedirectListResponse)
    def bulk_destination(request: Request, update: DestinationUpdate):
        workspace: Workspace = request.app.state.workspace
        workspace.apply_bulk(update.destination)
        return _redirect_list(workspace)

    @app.put("/redirects/{index}", response_model=RedirectListResponse)
    def edit_destination(request: Request, index: int, update: DestinationUpdate):
        workspace: Workspace = request.app.state.workspace
        try:
            workspace.edit_destination(index, update.destination)
        except SlugmapError as exc:
            raise _http_error(exc) from exc
        return _redirect_list(workspace)

    @app.get("/redirects.csv")
    def download_redirects(request: Request):
        try:
            content = request.app.state.workspace.redirects_csv()
        except SlugmapError as exc:
            raise _http_error(exc) from exc
        return _csv_download(content, settings.redirect_export_filename)

    return app


app = create_app()
