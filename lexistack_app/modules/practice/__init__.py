# File: lexistack_app/modules/practice/__init__.py
"""Practice module: flashcard and quiz game engines and their API."""

from flask import Blueprint

practice_bp = Blueprint('practice', __name__)
