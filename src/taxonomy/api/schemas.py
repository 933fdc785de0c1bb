"""Pydantic request/response schemas for the Taxonomy API."""

from __future__ import annotations

from pydantic import BaseModel, Field

# --- Category Request Schemas ---


class CreateCategoryRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Graphic Tees",
                    "slug": "graphic-tees",
                    "parent_id": "c3d4e5f6-a7b8-9012-cdef-123456789012",
                    "featured": True,
                    "description": "Printed crew-neck tees.",
                    "meta_title": "Graphic Tees | Apparel",
                    "image_url": "/uploads/category-1718000000000.png",
                    "image_alt": "Stack of printed tees",
                }
            ]
        }
    }

    name: str = Field(..., max_length=100)
    slug: str | None = Field(None, max_length=200)
    parent_id: str | None = None
    featured: bool = False
    description: str | None = None
    meta_title: str | None = Field(None, max_length=70)
    meta_description: str | None = Field(None, max_length=160)
    image_url: str | None = Field(None, max_length=500)
    image_alt: str | None = Field(None, max_length=255)


class UpdateCategoryRequest(BaseModel):
    """Fields omitted from the body stay as they are.

    ``parent_id: null`` moves to the root; ``featured: null`` leaves the flag as it is.
    """

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"slug": "tees"},
                {"parent_id": None},
                {"name": "Tees", "featured": False},
            ]
        }
    }

    name: str | None = Field(None, max_length=100)
    slug: str | None = Field(None, max_length=200)
    parent_id: str | None = None
    featured: bool | None = None
    description: str | None = None
    meta_title: str | None = Field(None, max_length=70)
    meta_description: str | None = Field(None, max_length=160)
    image_url: str | None = Field(None, max_length=500)
    image_alt: str | None = Field(None, max_length=255)


# --- Response Schemas ---


class AncestorResponse(BaseModel):
    id: str
    name: str
    slug: str


class CategoryResponse(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "id": "d4e5f6a7-b8c9-0123-def0-234567890123",
                    "name": "Graphic Tees",
                    "slug": "graphic-tees",
                    "parent_id": "c3d4e5f6-a7b8-9012-cdef-123456789012",
                    "ancestors": [
                        {"id": "b2c3d4e5-f6a7-8901-bcde-f12345678901", "name": "Apparel", "slug": "apparel"},
                        {"id": "c3d4e5f6-a7b8-9012-cdef-123456789012", "name": "T-Shirts", "slug": "t-shirts"},
                    ],
                    "featured": False,
                    "created_at": "2026-01-05T10:00:00",
                    "updated_at": "2026-01-05T10:00:00",
                }
            ]
        }
    }

    id: str
    name: str
    slug: str
    parent_id: str | None = None
    ancestors: list[AncestorResponse] = []
    featured: bool = False
    description: str | None = None
    meta_title: str | None = None
    meta_description: str | None = None
    image_url: str | None = None
    image_alt: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class CategoryTreeNode(CategoryResponse):
    children: list[CategoryTreeNode] = []


class SlugLookupResponse(BaseModel):
    category: CategoryResponse
    breadcrumbs: list[AncestorResponse]
    path: str


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    pages: int


class CategoryListResponse(BaseModel):
    categories: list[CategoryResponse]
    pagination: Pagination
