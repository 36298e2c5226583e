import itertools

import pytest

from folio import create_app
from folio.application.cms.create_page import create_page
from folio.extensions import db as _db
from folio.models import Template


@pytest.fixture
def app(tmp_path):
    app = create_app("testing")
    app.config["UPLOAD_FOLDER"] = str(tmp_path / "uploads")

    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def template(app):
    template = Template(
        identifier="standard",
        name="Standard page",
        fields={
            "intro": {"repeatable": False, "label": "Introduction"},
            "slideshow": {"repeatable": True, "label": "Slides"},
        },
    )
    _db.session.add(template)
    _db.session.commit()
    return template


@pytest.fixture
def make_page(template):
    """create_page with the standard template unless told otherwise."""
    def _make(identifier, **data):
        data.setdefault("template_id", template.id)
        return create_page(data={"identifier": identifier, **data})
    return _make


@pytest.fixture
def make_field(make_page):
    """A persisted field of `field_type` living on its own page."""
    counter = itertools.count(1)

    def _make(field_type, value=None, required=False):
        page = make_page(
            f"field_page_{next(counter)}",
            parts=[{
                "identifier": "content",
                "fields": [{
                    "identifier": "subject",
                    "type": field_type,
                    "value": value,
                    "required": required,
                }],
            }],
        )
        return page.parts[0].fields[0]
    return _make
