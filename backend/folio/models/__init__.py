# Models package - import every mapped class so relationships resolve
from folio.models.template import Template, fields_schema
from folio.models.page import Page
from folio.models.page_part import PagePart
from folio.models.field import (
    Field, StringField, RichTextField, IntegerField, DecimalField,
    BooleanField, DateField, FileField, ImageField, FIELD_TYPES
)

__all__ = [
    'Template', 'fields_schema',
    'Page',
    'PagePart',
    'Field', 'StringField', 'RichTextField', 'IntegerField', 'DecimalField',
    'BooleanField', 'DateField', 'FileField', 'ImageField', 'FIELD_TYPES'
]
