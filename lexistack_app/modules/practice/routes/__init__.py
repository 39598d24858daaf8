from .. import practice_bp

from . import api  # noqa: F401,E402
