"""FastAPI endpoints for the Taxonomy domain.

Callers reaching these routes are assumed to be authorized already; the
authorization collaborator sits in front of the application.
"""

from fastapi import APIRouter, Query

from taxonomy.api.schemas import (
    CategoryListResponse,
    CategoryResponse,
    CategoryTreeNode,
    CreateCategoryRequest,
    SlugLookupResponse,
    UpdateCategoryRequest,
)
from taxonomy.category.services import get_services

category_router = APIRouter(prefix="/categories", tags=["categories"])

_ROOT_MARKERS = ("", "null", "root")


# --- Reads ---


@category_router.get("", response_model=CategoryListResponse)
async def list_categories(
    parent: str | None = None,
    featured: bool | None = None,
    search: str | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
) -> dict:
    roots_only = parent is not None and parent.lower() in _ROOT_MARKERS
    result = get_services().resolver.search(
        parent_id=None if roots_only else parent,
        roots_only=roots_only,
        featured=featured,
        search=search,
        page=page,
        limit=limit,
    )
    result["categories"] = [category.as_dict() for category in result["categories"]]
    return result


@category_router.get("/tree", response_model=list[CategoryTreeNode])
async def category_tree(root_id: str | None = None) -> list[dict]:
    return get_services().resolver.tree(root_id=root_id)


@category_router.get("/id/{category_id}", response_model=CategoryResponse)
async def get_category(category_id: str) -> dict:
    return get_services().resolver.resolve_by_id(category_id).as_dict()


@category_router.get("/id/{category_id}/children", response_model=list[CategoryResponse])
async def get_children(category_id: str) -> list[dict]:
    return [child.as_dict() for child in get_services().resolver.children(category_id)]


@category_router.get("/path/{slug_path:path}", response_model=SlugLookupResponse)
async def get_category_by_path(slug_path: str) -> dict:
    category = get_services().resolver.resolve_by_slug_path(slug_path)
    return _slug_lookup(category)


@category_router.get("/{slug}", response_model=SlugLookupResponse)
async def get_category_by_slug(slug: str) -> dict:
    category = get_services().resolver.resolve_by_slug(slug)
    return _slug_lookup(category)


def _slug_lookup(category) -> dict:
    resolver = get_services().resolver
    return {
        "category": category.as_dict(),
        "breadcrumbs": resolver.breadcrumbs(category),
        "path": resolver.slug_path(category),
    }


# --- Writes ---


@category_router.post("", status_code=201, response_model=CategoryResponse)
async def create_category(body: CreateCategoryRequest) -> dict:
    category = get_services().lifecycle.create(
        name=body.name,
        slug=body.slug,
        parent_id=None if (body.parent_id or "").lower() in _ROOT_MARKERS else body.parent_id,
        featured=body.featured,
        description=body.description,
        meta_title=body.meta_title,
        meta_description=body.meta_description,
        image_url=body.image_url,
        image_alt=body.image_alt,
    )
    return category.as_dict()


@category_router.api_route("/{category_id}", methods=["PATCH", "PUT"], response_model=CategoryResponse)
async def update_category(category_id: str, body: UpdateCategoryRequest) -> dict:
    changes = {name: getattr(body, name) for name in body.model_fields_set}
    if "parent_id" in changes and (changes["parent_id"] or "").lower() in _ROOT_MARKERS:
        changes["parent_id"] = None
    category = get_services().lifecycle.update(category_id, **changes)
    return category.as_dict()


@category_router.delete("/{category_id}", response_model=CategoryResponse)
async def delete_category(category_id: str) -> dict:
    return get_services().lifecycle.delete(category_id).as_dict()
