# File: lexistack_app/modules/vocabulary/__init__.py
"""Vocabulary acquisition: extract or generate words, then look them up."""

from flask import Blueprint

vocabulary_bp = Blueprint('vocabulary', __name__)
