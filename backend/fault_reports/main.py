from __future__ import annotations

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from starlette.datastructures import Headers
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from .routes.reports import router as reports_router
from .routes.shared import get_attachment_store, get_settings
from .storage.attachments import AttachmentStore


def _too_large(limit: int) -> str:
    return f"Request body exceeds {limit // 1024 // 1024}MB limit"


class BodySizeLimitMiddleware:
    """Reject request bodies above ``max_body_bytes``.

    A declared Content-Length is checked up front; chunked bodies are
    counted while the endpoint reads them.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        limit = get_settings().max_body_bytes
        length = Headers(scope=scope).get("content-length")
        if length and length.isdigit() and int(length) > limit:
            response = JSONResponse(status_code=413, content={"error": _too_large(limit)})
            await response(scope, receive, send)
            return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > limit:
                    raise HTTPException(status_code=413, detail=_too_large(limit))
            return message

        await self.app(scope, limited_receive, send)


app = FastAPI(title="Fault Report Backend", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(BodySizeLimitMiddleware)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


app.include_router(reports_router)


@app.get("/health")
def health() -> dict:
    return {"ok": True}


@app.get(f"{get_settings().uploads_url_prefix}/{{relative_path:path}}")
def serve_upload(
    relative_path: str,
    attachments: AttachmentStore = Depends(get_attachment_store),
):
    path = attachments.resolve(relative_path)
    if path is None:
        raise HTTPException(status_code=404, detail="File not found")
    return FileResponse(path)
