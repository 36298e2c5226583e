from folio.models.page_part import PagePart
from .field import normalize_value
from .page_part import normalize_part

def normalize_resolved(result):
    """Output of Page.resolve: a part, a list of parts or a field value."""
    if isinstance(result, PagePart):
        return {"part": normalize_part(result)}
    if isinstance(result, list):
        return {"parts": [normalize_part(p) for p in result]}
    return {"value": normalize_value(result)}
