"""
Blueprints of the community API.

All blueprints share one Services bundle; domain errors raised by the services
are rendered by murshid.utils.error_handler.
"""
from flask import request

from murshid.errors import ValidationError
from murshid.services import build_services

services = build_services()


def json_body():
    """Request JSON object, or {} when the body is missing."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('http.400')
    return data
