"""
Static front-end serving (must be included last: catch-all route)
"""
from fastapi import APIRouter
from fastapi.responses import FileResponse, HTMLResponse, PlainTextResponse
from pathlib import Path
from typing import Optional

from buzzhub import state


router = APIRouter(tags=["static"])


def static_root() -> Optional[Path]:
    """First configured static directory that exists"""
    for candidate in state.CONFIG.static_dirs:
        path = Path(candidate)
        if path.is_dir():
            return path.resolve()
    return None


def resolve_static(root: Path, url_path: str) -> Optional[Path]:
    """
    Map a URL path to a file under root

    Directories map to their index.html. A path that does not exist
    falls back to the index.html of its parent directory so the
    front-end router can handle it.

    Returns:
        File path, or None if nothing matches

    Raises:
        ValueError: If the path escapes root
    """
    target = (root / (url_path.lstrip("/") or "index.html")).resolve()
    if not target.is_relative_to(root):
        raise ValueError("path escapes static root")

    if target.is_dir():
        target = target / "index.html"
    elif not target.exists():
        target = target.parent / "index.html"
    return target if target.is_file() else None


@router.get("/{url_path:path}", include_in_schema=False)
async def serve_static(url_path: str):
    root = static_root()
    if root is None:
        return HTMLResponse(
            content="<h1>Front-end not found</h1><p>Build web/dist or create public/index.html</p>",
            status_code=404
        )
    try:
        file_path = resolve_static(root, url_path)
    except ValueError:
        return PlainTextResponse("Bad request", status_code=400)
    if file_path is None:
        return PlainTextResponse("Not found", status_code=404)
    return FileResponse(file_path)
