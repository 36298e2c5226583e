from flask import Blueprint

# Public page reads and the admin reorder boundary, mounted at /api/v1
v1_bp = Blueprint("v1", __name__)

from . import health  # noqa: E402,F401
from . import pages  # noqa: E402,F401
from . import admin  # noqa: E402,F401
