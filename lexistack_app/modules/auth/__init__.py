# File: lexistack_app/modules/auth/__init__.py
"""Auth module: registration, login and the current user."""

from flask import Blueprint

auth_bp = Blueprint('auth', __name__)
