from datetime import datetime


def normalize_value(value):
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def normalize_field(field, admin=False):
    base = {
        "identifier": field.identifier,
        "type": field.type,
        "value": normalize_value(field.value)
    }

    if admin:
        base["id"] = field.id
        base["required"] = field.required
        base["raw_value"] = field.raw_value

    return base
