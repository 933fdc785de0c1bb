"""Category management: commands and handlers."""

import json

from protean import handle
from protean.fields import Boolean, Identifier, String, Text
from protean.utils.globals import current_domain

from taxonomy.category.category import NAME_MAX_LENGTH, SLUG_MAX_LENGTH, Category
from taxonomy.category.store import CategoryStore
from taxonomy.domain import taxonomy


@taxonomy.command(part_of="Category")
class CreateCategory:
    name: String(required=True, max_length=NAME_MAX_LENGTH)
    slug: String(required=True, max_length=SLUG_MAX_LENGTH)
    parent_id: Identifier()
    featured: Boolean(default=False)
    description: Text()
    meta_title: String(max_length=70)
    meta_description: String(max_length=160)
    image_url: String(max_length=500)
    image_alt: String(max_length=255)


@taxonomy.command(part_of="Category")
class UpdateCategory:
    """Omitted fields are left unchanged.

    ``reparent`` marks ``parent_id`` as given, so an empty ``parent_id``
    moves the category to the root level. ``cleared`` is a JSON list of
    descriptive fields to empty.
    """

    category_id: Identifier(required=True)
    name: String(max_length=NAME_MAX_LENGTH)
    slug: String(max_length=SLUG_MAX_LENGTH)
    reparent: Boolean(default=False)
    parent_id: Identifier()
    featured: Boolean()
    description: Text()
    meta_title: String(max_length=70)
    meta_description: String(max_length=160)
    image_url: String(max_length=500)
    image_alt: String(max_length=255)
    cleared: Text()


@taxonomy.command(part_of="Category")
class DeleteCategory:
    category_id: Identifier(required=True)


@taxonomy.command_handler(part_of=Category)
class ManageCategoryHandler:
    @handle(CreateCategory)
    def create_category(self, command):
        category = Category.create(
            name=command.name,
            slug=command.slug,
            parent_id=command.parent_id,
            featured=command.featured,
            description=command.description,
            meta_title=command.meta_title,
            meta_description=command.meta_description,
            image_url=command.image_url,
            image_alt=command.image_alt,
        )
        CategoryStore(current_domain).add(category)
        return str(category.id)

    @handle(UpdateCategory)
    def update_category(self, command):
        store = CategoryStore(current_domain)
        category = store.get(command.category_id)

        category.update_details(
            name=command.name,
            slug=command.slug,
            featured=command.featured,
            description=command.description,
            meta_title=command.meta_title,
            meta_description=command.meta_description,
            image_url=command.image_url,
            image_alt=command.image_alt,
            cleared=json.loads(command.cleared) if command.cleared else None,
        )
        if command.reparent:
            category.move_to(command.parent_id)

        store.save(category)
        return str(category.id)

    @handle(DeleteCategory)
    def delete_category(self, command):
        store = CategoryStore(current_domain)
        store.remove(store.get(command.category_id))
        return str(command.category_id)
