# File: lexistack_app/modules/library/__init__.py
"""Library module: user collections, words and their meanings."""

from flask import Blueprint

library_bp = Blueprint('library', __name__)
