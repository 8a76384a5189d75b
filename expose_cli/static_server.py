"""
Built-in static file server used for directories without a recognised framework.

Usage: python -m expose_cli.static_server <port> <directory>
"""

import logging
import sys
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import FileResponse, PlainTextResponse

logger = logging.getLogger("expose.static")

MIME_TYPES = {
    ".html": "text/html; charset=utf-8",
    ".css": "text/css; charset=utf-8",
    ".js": "application/javascript; charset=utf-8",
    ".json": "application/json; charset=utf-8",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".webp": "image/webp",
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".ttf": "font/ttf",
    ".txt": "text/plain; charset=utf-8",
    ".pdf": "application/pdf",
}


def get_mime_type(path: str) -> str:
    return MIME_TYPES.get(Path(path).suffix.lower(), "application/octet-stream")


def create_app(base_dir: Path | str) -> FastAPI:
    base = Path(base_dir).resolve()
    app = FastAPI(docs_url=None, redoc_url=None, openapi_url=None)

    @app.get("/{path:path}")
    async def serve(path: str, request: Request):
        raw_path = request.url.path
        if ".." in raw_path:
            return PlainTextResponse("Forbidden", status_code=403)

        relative = path or "index.html"
        file_path = (base / relative.lstrip("/")).resolve()
        if not file_path.is_relative_to(base):
            return PlainTextResponse("Forbidden", status_code=403)
        if not file_path.is_file():
            return PlainTextResponse("Not Found", status_code=404)

        return FileResponse(file_path, media_type=get_mime_type(relative))

    return app


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    port = int(argv[0]) if argv else 3000
    base_dir = argv[1] if len(argv) > 1 else "."

    print(f"Static server running on http://0.0.0.0:{port}")
    print(f"Serving files from: {base_dir}", flush=True)
    uvicorn.run(create_app(base_dir), host="0.0.0.0", port=port, log_level="info")
    return 0


if __name__ == "__main__":
    sys.exit(main())
