from flask import current_app, request, url_for
from backoffice.errors import InvalidArgument
import logging

logger = logging.getLogger(__name__)

# Entities this application routes itself.
_LOCAL_EDIT_ENDPOINTS = {
    'return_request': 'return_requests.return_request_detail',
    'return_request_accept': 'return_requests.accept_return_request',
}


def wants_json_response() -> bool:
    accept = request.headers.get('Accept', '') or ''
    xrw = request.headers.get('X-Requested-With')
    return (
        request.path.startswith('/api/')
        or request.is_json
        or ('application/json' in accept)
        or (xrw == 'XMLHttpRequest')
    )


def build_edit_url(entity_type, entity_id):
    endpoint = _LOCAL_EDIT_ENDPOINTS.get(entity_type)
    if endpoint:
        return url_for(endpoint, return_request_id=entity_id)

    templates = current_app.config.get('ADMIN_EDIT_URL_TEMPLATES') or {}
    template = templates.get(entity_type)
    if not template:
        logger.warning("No edit URL configured for %s", entity_type)
        return None
    return template.format(id=entity_id)


def optional_int(data, key):
    """Read an optional integer field; empty strings count as absent."""
    raw = data.get(key)
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    if isinstance(raw, bool):
        raise InvalidArgument(f'{key} must be an integer')
    if isinstance(raw, float) and not raw.is_integer():
        raise InvalidArgument(f'{key} must be an integer')
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise InvalidArgument(f'{key} must be an integer')


def optional_str(data, key):
    """Read an optional text field; anything but a string is rejected."""
    raw = data.get(key)
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise InvalidArgument(f'{key} must be a string')
    return raw


def split_safe(value, separator=','):
    if not value:
        return []
    return [x.strip() for x in value.split(separator) if x.strip()]
