from typing import Any, List, Optional
from flask import current_app, has_app_context
from folio.extensions import db
from .base import BaseModel

class PagePart(BaseModel):
    """
    A named content block of a page.

    Parts attached to a page (page_id set) are ranked among the page's parts.
    Subparts hang under a repeatable part (parent_part_id set, no page) and
    are ranked among their siblings; both scopes share the position column.
    """
    __tablename__ = "page_parts"

    page_id = db.Column(db.String(36), db.ForeignKey("pages.id"), nullable=True, index=True)
    parent_part_id = db.Column(db.String(36), db.ForeignKey("page_parts.id"), nullable=True, index=True)
    identifier = db.Column(db.String(100), nullable=True, index=True)
    label = db.Column(db.String(200), nullable=True)
    repeatable = db.Column(db.Boolean, nullable=False, default=False)
    position = db.Column(db.Integer, nullable=False, default=0)

    page = db.relationship("Page", back_populates="parts")

    fields = db.relationship(
        "Field",
        back_populates="page_part",
        cascade="all, delete-orphan"
    )

    subparts = db.relationship(
        "PagePart",
        back_populates="parent",
        order_by="PagePart.position",
        cascade="all, delete-orphan"
    )

    parent = db.relationship("PagePart", back_populates="subparts", remote_side="PagePart.id")

    _attr_cache = None

    @property
    def is_subpart(self) -> bool:
        return self.page_id is None and self.page is None

    @property
    def is_repeatable(self) -> bool:
        if self.parent is not None:
            return bool(self.parent.repeatable)
        return bool(self.repeatable)

    def rank_scope(self) -> List["PagePart"]:
        """Siblings sharing this part's position scope, this part included."""
        if self.parent is not None:
            return list(self.parent.subparts)
        if self.page is not None:
            return list(self.page.parts)
        return [self]

    def field(self, identifier: str):
        identifier = str(identifier)
        for field in self.fields:
            if field.identifier == identifier:
                return field
        return None

    def resolve(self, identifier: str) -> Any:
        """
        Value of the field named `identifier`.

        With FIELD_DEFAULTS_IN_PREVIEW on, an unset value falls back to the
        type default so previews never render holes. Unknown identifiers give None.
        """
        identifier = str(identifier)
        if self._attr_cache is None:
            self._attr_cache = {}

        if identifier not in self._attr_cache:
            field = self.field(identifier)
            if field is None:
                return None

            value = field.value
            if value is None and _field_defaults_enabled():
                value = field.default()
            self._attr_cache[identifier] = value

        return self._attr_cache[identifier]

    attr = resolve

    def clear_attr_cache(self) -> None:
        self._attr_cache = None

    def spawn_subpart(self) -> Optional["PagePart"]:
        """
        New unsaved subpart modelled on the first existing one, with empty
        copies of its fields. None unless this is a repeatable top-level part
        that already has a subpart to copy.
        """
        if not self.is_repeatable or self.is_subpart:
            return None

        if not self.subparts:
            return None
        master = self.subparts[0]

        subpart = PagePart(
            identifier=master.identifier,
            label=master.label,
            repeatable=master.repeatable,
            parent_part_id=self.id,
        )
        for field in master.fields:
            subpart.fields.append(field.duplicate())

        return subpart

    def __repr__(self):
        return f"<PagePart {self.identifier or self.id}>"


def _field_defaults_enabled() -> bool:
    return has_app_context() and bool(current_app.config.get("FIELD_DEFAULTS_IN_PREVIEW"))
