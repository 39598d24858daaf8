from .. import library_bp

from . import api  # noqa: F401,E402
