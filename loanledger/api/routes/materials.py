"""
Materials catalog endpoints.
"""

from fastapi import APIRouter, Depends, Path, Query, status

from loanledger.api.dependencies import get_mat_store
from loanledger.application.dto.requests import CreateMaterialRequest, UpdateMaterialRequest
from loanledger.application.dto.responses import (
    DeleteResponse,
    ErrorResponse,
    MaterialListResponse,
    MaterialResponse,
)
from loanledger.core.entities import Material
from loanledger.core.exceptions import MaterialNotFoundError
from loanledger.core.limits import MAX_DB_INTEGER
from loanledger.infrastructure.storage.sqlite import SQLiteMaterialStore

router = APIRouter(prefix="/api/materials", tags=["materials"])


@router.get("", response_model=MaterialListResponse)
async def list_materials(
    q: str | None = Query(default=None, description="Case-insensitive name search"),
    store: SQLiteMaterialStore = Depends(get_mat_store),
) -> MaterialListResponse:
    """List materials ordered by name, optionally filtered by name substring."""
    materials = await store.list_materials(query=q)
    return MaterialListResponse(
        materials=[MaterialResponse.from_entity(m) for m in materials],
        total=len(materials),
    )


@router.get(
    "/{material_id}",
    response_model=MaterialResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_material(
    material_id: int = Path(..., le=MAX_DB_INTEGER),
    store: SQLiteMaterialStore = Depends(get_mat_store),
) -> MaterialResponse:
    """Get material detail."""
    material = await store.get_material(material_id)
    if material is None:
        raise MaterialNotFoundError(material_id)
    return MaterialResponse.from_entity(material)


@router.post(
    "",
    response_model=MaterialResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_material(
    request: CreateMaterialRequest,
    store: SQLiteMaterialStore = Depends(get_mat_store),
) -> MaterialResponse:
    """Add a material to the catalog."""
    material = await store.create_material(
        Material(name=request.name, type=request.type, quantity=request.quantity)
    )
    return MaterialResponse.from_entity(material)


@router.put(
    "/{material_id}",
    response_model=MaterialResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_material(
    request: UpdateMaterialRequest,
    material_id: int = Path(..., le=MAX_DB_INTEGER),
    store: SQLiteMaterialStore = Depends(get_mat_store),
) -> MaterialResponse:
    """Update name, type or quantity; omitted fields are kept."""
    material = await store.update_material(
        material_id,
        name=request.name,
        type=request.type,
        quantity=request.quantity,
    )
    if material is None:
        raise MaterialNotFoundError(material_id)
    return MaterialResponse.from_entity(material)


@router.delete(
    "/{material_id}",
    response_model=DeleteResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def delete_material(
    material_id: int = Path(..., le=MAX_DB_INTEGER),
    store: SQLiteMaterialStore = Depends(get_mat_store),
) -> DeleteResponse:
    """Delete a material that has never been lent."""
    if not await store.delete_material(material_id):
        raise MaterialNotFoundError(material_id)
    return DeleteResponse(deleted=True, id=material_id)
