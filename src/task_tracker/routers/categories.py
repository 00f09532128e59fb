from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status

from ..dependencies import get_category_service
from ..schemas import CategoryCreate, CategoryOut, CategoryUpdate, ErrorOut
from ..services import CategoryService

router = APIRouter(
    prefix="/api/v1/categories",
    tags=["categories"],
)

_ERRORS = {
    400: {"model": ErrorOut, "description": "Validation error"},
    404: {"model": ErrorOut, "description": "Category not found"},
    409: {"model": ErrorOut, "description": "Category name already taken"},
}


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=List[CategoryOut],
    summary="List Categories",
    description="Return every category.",
)
def list_categories(service: CategoryService = Depends(get_category_service)) -> List[CategoryOut]:
    return [CategoryOut.from_entity(c) for c in service.get_all_categories()]


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=CategoryOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Category",
    description="Create a category. Names are unique (case-sensitive).",
    responses={400: _ERRORS[400], 409: _ERRORS[409]},
)
def create_category(payload: CategoryCreate, service: CategoryService = Depends(get_category_service)) -> CategoryOut:
    created = service.create_category(payload.to_entity())
    return CategoryOut.from_entity(created)


# PUBLIC_INTERFACE
@router.get(
    "/by-name/{name}",
    response_model=CategoryOut,
    summary="Get Category By Name",
    description="Look a category up by its exact name.",
    responses={404: _ERRORS[404]},
)
def get_category_by_name(name: str, service: CategoryService = Depends(get_category_service)) -> CategoryOut:
    return CategoryOut.from_entity(service.get_category_by_name(name))


# PUBLIC_INTERFACE
@router.get(
    "/{category_id}",
    response_model=CategoryOut,
    summary="Get Category",
    description="Get a single category by ID.",
    responses={404: _ERRORS[404]},
)
def get_category(category_id: str, service: CategoryService = Depends(get_category_service)) -> CategoryOut:
    return CategoryOut.from_entity(service.get_category_by_id(category_id))


# PUBLIC_INTERFACE
@router.put(
    "/{category_id}",
    response_model=CategoryOut,
    summary="Update Category",
    description="Change the provided fields of a category; omitted fields are kept.",
    responses=_ERRORS,
)
def update_category(
    category_id: str,
    payload: CategoryUpdate,
    service: CategoryService = Depends(get_category_service),
) -> CategoryOut:
    category = payload.apply_to(service.get_category_by_id(category_id))
    return CategoryOut.from_entity(service.update_category(category))


# PUBLIC_INTERFACE
@router.delete(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Category",
    description="Delete a category by ID. Tasks referencing it are handled per CATEGORY_DELETE_POLICY.",
    responses={404: _ERRORS[404]},
)
def delete_category(category_id: str, service: CategoryService = Depends(get_category_service)) -> None:
    service.delete_category(category_id)
    return None
