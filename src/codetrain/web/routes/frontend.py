"""Static front-end assets with single-page-app fallback.

Registered last: any GET not matched by an API route lands here. Existing
files under the static directory are served as-is; every other path gets
index.html so client-side navigation can take over. Unknown /api paths
stay JSON 404s.
"""

from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import FileResponse

from codetrain.config.app_config import AppConfig
from codetrain.web.dependencies import get_config

router = APIRouter(tags=["frontend"], include_in_schema=False)

INDEX_FILE = "index.html"


def _cache_headers(config: AppConfig) -> dict[str, str]:
    if config.static_max_age > 0:
        return {"Cache-Control": f"public, max-age={config.static_max_age}"}
    return {"Cache-Control": "no-cache"}


def _resolve_asset(static_dir: Path, path: str) -> Path | None:
    """Return the file for path if it exists inside static_dir."""
    if not path:
        return None
    root = static_dir.resolve()
    candidate = (root / path).resolve()
    if not candidate.is_relative_to(root) or not candidate.is_file():
        return None
    return candidate


@router.get("/{full_path:path}")
async def serve_frontend(full_path: str, config: AppConfig = Depends(get_config)) -> FileResponse:
    """Serve a static asset or fall back to the entry document."""
    if full_path == "api" or full_path.startswith("api/"):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")

    asset = _resolve_asset(config.static_dir, full_path)
    if asset is None:
        asset = config.static_dir / INDEX_FILE
        if not asset.is_file():
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")

    return FileResponse(asset, headers=_cache_headers(config))
