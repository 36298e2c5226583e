from typing import Any, Dict, Optional
from folio.extensions import db
from .base import BaseModel

class Template(BaseModel):
    __tablename__ = "templates"

    identifier = db.Column(db.String(100), unique=True, nullable=False, index=True)
    name = db.Column(db.String(200), nullable=True)

    # {"slideshow": {"repeatable": True, "label": "Slides"}, "intro": {...}}
    fields = db.Column(db.JSON, nullable=False, default=dict)

    pages = db.relationship("Page", back_populates="template")


def fields_schema(template_id: Optional[str]) -> Dict[str, Dict[str, Any]]:
    """Part identifier -> descriptor mapping for a template, {} when unknown."""
    if not template_id:
        return {}
    template = db.session.get(Template, template_id)
    return dict(template.fields or {}) if template else {}
