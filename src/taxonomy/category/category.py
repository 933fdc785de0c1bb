"""Category aggregate for the catalogue hierarchy."""

import json
import re
from dataclasses import asdict, dataclass
from datetime import datetime

from protean.fields import Boolean, DateTime, Identifier, String, Text

from taxonomy.domain import taxonomy

_SCRIPT_BLOCK = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)

NAME_MAX_LENGTH = 100
SLUG_MAX_LENGTH = 200

DESCRIPTIVE_FIELDS = ("description", "meta_title", "meta_description", "image_url", "image_alt")


def strip_scripts(value):
    if value is None:
        return None
    return _SCRIPT_BLOCK.sub("", value)


@dataclass(frozen=True)
class AncestorSummary:
    """The ``{id, name, slug}`` triple a node caches for each of its ancestors."""

    id: str
    name: str
    slug: str

    @classmethod
    def from_dict(cls, data):
        return cls(id=data["id"], name=data["name"], slug=data["slug"])

    def to_dict(self):
        return asdict(self)


@taxonomy.aggregate
class Category:
    """A node in the category tree.

    ``ancestry`` is a materialized path stored as JSON: the summaries of every
    ancestor from the root down to the immediate parent. Only the ancestry
    maintainer writes it, through ``cache_ancestors`` and ``detach``.
    """

    name: String(required=True, max_length=NAME_MAX_LENGTH)
    slug: String(required=True, max_length=SLUG_MAX_LENGTH, unique=True)
    parent_id: Identifier()
    ancestry: Text(default="[]")
    featured: Boolean(default=False)
    description: Text()
    meta_title: String(max_length=70)
    meta_description: String(max_length=160)
    image_url: String(max_length=500)
    image_alt: String(max_length=255)
    created_at: DateTime(default=datetime.now)
    updated_at: DateTime(default=datetime.now)

    @classmethod
    def create(cls, name, slug, parent_id=None, featured=False, **attributes):
        now = datetime.now()
        if "description" in attributes:
            attributes["description"] = strip_scripts(attributes["description"])
        return cls(
            name=name,
            slug=slug,
            parent_id=parent_id,
            ancestry="[]",
            featured=bool(featured),
            created_at=now,
            updated_at=now,
            **attributes,
        )

    def update_details(self, name=None, slug=None, featured=None, cleared=None, **attributes):
        """Apply the given changes; ``None`` leaves a field as it is.

        Descriptive fields named in ``cleared`` are reset to empty.
        """
        if name is not None:
            self.name = name
        if slug is not None:
            self.slug = slug
        if featured is not None:
            self.featured = featured
        for field_name, value in attributes.items():
            if value is None:
                continue
            if field_name == "description":
                value = strip_scripts(value)
            setattr(self, field_name, value)
        for field_name in cleared or []:
            setattr(self, field_name, None)
        self.touch()

    def move_to(self, parent_id):
        self.parent_id = parent_id or None
        self.touch()

    def cache_ancestors(self, chain):
        self.ancestry = json.dumps([dict(entry) for entry in chain])

    def detach(self):
        """Turn this node into a root with an empty ancestor chain."""
        self.parent_id = None
        self.ancestry = "[]"
        self.touch()

    @property
    def ancestors(self) -> list[dict]:
        return json.loads(self.ancestry) if self.ancestry else []

    @property
    def depth(self) -> int:
        return len(self.ancestors)

    @property
    def ancestor_summaries(self) -> list[AncestorSummary]:
        return [AncestorSummary.from_dict(entry) for entry in self.ancestors]

    @property
    def ancestor_ids(self) -> list[str]:
        return [entry["id"] for entry in self.ancestors]

    @property
    def ancestor_slugs(self) -> list[str]:
        return [entry["slug"] for entry in self.ancestors]

    def summary(self) -> AncestorSummary:
        return AncestorSummary(id=str(self.id), name=self.name, slug=self.slug)

    def touch(self):
        self.updated_at = datetime.now()

    def as_dict(self) -> dict:
        return {
            "id": str(self.id),
            "name": self.name,
            "slug": self.slug,
            "parent_id": self.parent_id,
            "ancestors": self.ancestors,
            "featured": bool(self.featured),
            "description": self.description,
            "meta_title": self.meta_title,
            "meta_description": self.meta_description,
            "image_url": self.image_url,
            "image_alt": self.image_alt,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
