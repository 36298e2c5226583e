from .field import normalize_field

def normalize_part(part, admin=False, include_subparts=True):
    fields = sorted(part.fields, key=lambda f: f.identifier or "")

    data = {
        "id": part.id,
        "identifier": part.identifier,
        "label": part.label,
        "position": part.position,
        "repeatable": part.is_repeatable,
        "fields": [normalize_field(f, admin=admin) for f in fields]
    }

    if include_subparts:
        subparts = sorted(part.subparts, key=lambda s: s.position)
        data["subparts"] = [
            normalize_part(s, admin=admin) for s in subparts
        ]

    return data
