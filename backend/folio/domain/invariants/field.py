import re
from typing import Dict, List
from folio.utils.text import is_blank
from .exceptions import ValidationError

IDENTIFIER_FORMAT = re.compile(r"^[a-z_0-9]+$")
IDENTIFIER_MESSAGE = "Only downcase letters, numbers and underscores are allowed"


def add_error(errors: Dict[str, List[str]], key: str, message: str) -> None:
    errors.setdefault(key, []).append(message)


def merge_errors(errors: Dict[str, List[str]], nested: Dict[str, List[str]], prefix: str) -> None:
    for key, messages in nested.items():
        errors.setdefault(f"{prefix}.{key}", []).extend(messages)


def field_errors(field) -> Dict[str, List[str]]:
    errors: Dict[str, List[str]] = {}

    if is_blank(field.identifier):
        add_error(errors, "identifier", "can't be blank")
    elif not IDENTIFIER_FORMAT.match(field.identifier):
        add_error(errors, "identifier", IDENTIFIER_MESSAGE)

    if field.required and is_blank(field.raw_value):
        add_error(errors, "value", "can't be blank")
    elif field.raw_value is not None:
        message = field.value_error(field.raw_value)
        if message:
            add_error(errors, "value", message)

    return errors


def assert_field(field):
    errors = field_errors(field)
    if errors:
        raise ValidationError(errors)
