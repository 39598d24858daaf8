# File: lexistack_app/modules/stats/__init__.py
"""Stats module: profile statistics derived from practice sessions."""

from flask import Blueprint

stats_bp = Blueprint('stats', __name__)
