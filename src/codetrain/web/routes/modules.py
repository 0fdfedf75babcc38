"""Module catalog endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from codetrain.core.catalog import ModuleCatalog
from codetrain.web.dependencies import get_catalog
from codetrain.web.schemas import (
    ErrorResponse,
    ModuleDetail,
    ModuleDetailResponse,
    ModuleListResponse,
    ModuleSummary,
)

router = APIRouter(
    prefix="/api/modules",
    tags=["modules"],
    responses={404: {"model": ErrorResponse}},
)


@router.get("", response_model=ModuleListResponse)
async def list_modules(catalog: ModuleCatalog = Depends(get_catalog)) -> ModuleListResponse:
    """List module summaries in catalog order."""
    modules = [ModuleSummary.model_validate(m) for m in catalog.list_modules()]
    return ModuleListResponse(modules=modules, count=len(modules))


@router.get("/{module_id}", response_model=ModuleDetailResponse)
async def get_module(
    module_id: int, catalog: ModuleCatalog = Depends(get_catalog)
) -> ModuleDetailResponse:
    """Get the full content of one module."""
    module = catalog.get(module_id)

    if module is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Module not found",
        )

    return ModuleDetailResponse(module=ModuleDetail.model_validate(module))
