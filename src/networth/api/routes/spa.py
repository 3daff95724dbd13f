"""Single-page client bundle.

Files that exist in the bundle directory are served as-is; any other path is
a client-side route and gets ``index.html``. API paths never fall through
to the bundle.
"""

from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import FileResponse, JSONResponse

from networth.core.config import settings

router = APIRouter()

_API_PREFIXES = ("api/", "health")


def resolve_static_path(static_dir: Path, full_path: str) -> Path | None:
    """
    Map a request path to a file of the bundle.

    Returns the requested file when it exists inside ``static_dir``,
    otherwise ``index.html`` (or None when the bundle has not been built).
    """
    root = static_dir.resolve()
    if full_path:
        candidate = (root / full_path).resolve()
        if candidate.is_relative_to(root) and candidate.is_file():
            return candidate

    index = root / "index.html"
    return index if index.is_file() else None


@router.get("/{full_path:path}", include_in_schema=False)
async def serve_spa(full_path: str):
    """Serve a bundle file or the client entry point."""
    if full_path.startswith(_API_PREFIXES):
        return JSONResponse(status_code=404, content={"detail": "Not Found"})

    path = resolve_static_path(Path(settings.STATIC_DIR), full_path)
    if path is None:
        return JSONResponse(status_code=404, content={"detail": "Client bundle not found"})
    return FileResponse(path)
