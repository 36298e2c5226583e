import re
from datetime import date, datetime, time
from typing import Any, Optional
from dateutil import parser as date_parser
from folio.extensions import db
from folio.utils.media import IMAGE_EXTENSIONS, FILE_EXTENSIONS, extension_of, save_file
from folio.utils.text import is_blank, strip_tags
from .base import BaseModel

INTEGER_FORMAT = re.compile(r"^[+-]?\d+$")
NUMBER_FORMAT = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")

TRUE_VALUES = {"t", "1", "true"}
FALSE_VALUES = {"f", "0", "false"}

LOREM = "Lorem ipsum dolor sit amet, consectetur adipiscing elit, sed do eiusmod tempor incididunt ut labore et dolore magna aliqua."


def noon_today() -> datetime:
    return datetime.combine(date.today(), time(12, 0))


def parse_date(text: str) -> datetime:
    """Flexible date parsing, missing time components default to noon."""
    return date_parser.parse(text, default=noon_today())


class Field(BaseModel):
    """
    A typed value inside a page part.

    The value is always stored as text (`raw_value`, column "value"); each
    subclass decides how assignments are serialized, how the stored text is
    read back and which stored texts are invalid.
    """
    __tablename__ = "fields"

    page_part_id = db.Column(db.String(36), db.ForeignKey("page_parts.id"), nullable=True, index=True)
    identifier = db.Column(db.String(100), nullable=False)
    type = db.Column(db.String(50), nullable=False)  # string, integer, decimal, boolean, date, file, image, rich_text
    required = db.Column(db.Boolean, nullable=False, default=False)
    raw_value = db.Column("value", db.Text, nullable=True)

    page_part = db.relationship("PagePart", back_populates="fields")

    __table_args__ = (
        db.UniqueConstraint("page_part_id", "identifier", name="uq_field_identifier_per_part"),
    )

    __mapper_args__ = {
        "polymorphic_on": type,
        "polymorphic_identity": "field",
    }

    @property
    def value(self) -> Any:
        if self.raw_value is None:
            return None
        return self.cast(self.raw_value)

    @value.setter
    def value(self, new_value: Any) -> None:
        self.raw_value = self.serialize(new_value)
        if self.page_part is not None:
            self.page_part.clear_attr_cache()

    # --- per type behaviour -------------------------------------------------

    def serialize(self, value: Any) -> Optional[str]:
        if is_blank(value):
            return None
        return str(value)

    def cast(self, raw: str) -> Any:
        return raw

    def value_error(self, raw: str) -> Optional[str]:
        """Message describing why `raw` is not acceptable, None when it is."""
        return None

    def default(self) -> Any:
        return None

    def duplicate(self) -> "Field":
        """Copy of this field with no value and no owning part."""
        return self.__class__(identifier=self.identifier, required=self.required)

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.identifier}={self.raw_value!r}>"


class StringField(Field):
    __mapper_args__ = {"polymorphic_identity": "string"}

    def default(self):
        return "Lorem ipsum"


class RichTextField(Field):
    __mapper_args__ = {"polymorphic_identity": "rich_text"}

    def serialize(self, value):
        if is_blank(value):
            return None
        text = strip_tags(value)
        return None if is_blank(text) else text

    def default(self):
        return LOREM


class IntegerField(Field):
    __mapper_args__ = {"polymorphic_identity": "integer"}

    def serialize(self, value):
        if is_blank(value):
            return None
        return str(value).strip()

    def cast(self, raw):
        return int(raw) if INTEGER_FORMAT.match(raw) else None

    def value_error(self, raw):
        if not INTEGER_FORMAT.match(raw):
            return "is not an integer"
        return None

    def default(self):
        return 123


class DecimalField(Field):
    __mapper_args__ = {"polymorphic_identity": "decimal"}

    def serialize(self, value):
        if is_blank(value):
            return None
        if isinstance(value, float):
            return repr(value)
        return str(value).strip()

    def cast(self, raw):
        return float(raw) if NUMBER_FORMAT.match(raw) else None

    def value_error(self, raw):
        if not NUMBER_FORMAT.match(raw):
            return "is not a number"
        return None

    def default(self):
        return 234.23


class BooleanField(Field):
    __mapper_args__ = {"polymorphic_identity": "boolean"}

    def serialize(self, value):
        # Unknown input is kept as given so validation can reject it
        if value is None or value is False:
            return "f"
        if value is True:
            return "t"
        key = str(value).strip().lower()
        if key in TRUE_VALUES:
            return "t"
        if key in FALSE_VALUES:
            return "f"
        return str(value)

    def cast(self, raw):
        return raw == "t"

    def value_error(self, raw):
        if raw not in ("t", "f"):
            return "is not a boolean"
        return None

    def default(self):
        return True


class DateField(Field):
    __mapper_args__ = {"polymorphic_identity": "date"}

    def serialize(self, value):
        if is_blank(value):
            return None
        if isinstance(value, datetime):
            return value.isoformat()
        if isinstance(value, date):
            return datetime.combine(value, time(12, 0)).isoformat()
        try:
            return parse_date(str(value)).isoformat()
        except (ValueError, OverflowError):
            return str(value)

    def cast(self, raw):
        try:
            return parse_date(raw)
        except (ValueError, OverflowError):
            return None

    def value_error(self, raw):
        try:
            parse_date(raw)
        except (ValueError, OverflowError):
            return "is not a date"
        return None

    def default(self):
        return noon_today()


class FileField(Field):
    """Holds a reference to an upload kept by the media storage."""
    __mapper_args__ = {"polymorphic_identity": "file"}

    allowed_extensions = FILE_EXTENSIONS

    def attach(self, upload):
        """Store an uploaded file (werkzeug FileStorage) and keep its reference."""
        self.value = save_file(upload, allowed=self.allowed_extensions)
        return self.raw_value

    def serialize(self, value):
        if is_blank(value):
            return None
        return str(value).strip()


class ImageField(FileField):
    __mapper_args__ = {"polymorphic_identity": "image"}

    allowed_extensions = IMAGE_EXTENSIONS

    def value_error(self, raw):
        if extension_of(raw.split("?", 1)[0]) not in IMAGE_EXTENSIONS:
            return "is not an image"
        return None

    def default(self):
        return "https://placehold.co/600x400.png"


FIELD_TYPES = {
    "string": StringField,
    "rich_text": RichTextField,
    "integer": IntegerField,
    "decimal": DecimalField,
    "boolean": BooleanField,
    "date": DateField,
    "file": FileField,
    "image": ImageField,
}
