"""Validation of JSON request bodies against pydantic models."""

from flask import request
from pydantic import ValidationError as PydanticValidationError

from lexistack_app.core.error_handlers import ValidationError


def parse_json(model):
    """Validate the current request's JSON body, raising a 400 ``ValidationError`` on bad input."""
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError('Invalid request payload', errors=e.errors(include_url=False, include_context=False))
