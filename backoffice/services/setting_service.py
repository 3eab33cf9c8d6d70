from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from backoffice.errors import DataUnavailable
from backoffice.models import Setting
import logging

logger = logging.getLogger(__name__)

RETURN_REQUEST_REASONS = 'OrderSettings.ReturnRequestReasons'
RETURN_REQUEST_ACTIONS = 'OrderSettings.ReturnRequestActions'

# Config keys holding the fallback value of a setting.
_CONFIG_DEFAULTS = {
    RETURN_REQUEST_REASONS: 'RETURN_REQUEST_REASONS',
    RETURN_REQUEST_ACTIONS: 'RETURN_REQUEST_ACTIONS',
}


def _scopes(language_id, store_id):
    language_id = language_id or 0
    store_id = store_id or 0
    scopes = [
        (store_id, language_id),
        (0, language_id),
        (store_id, 0),
        (0, 0),
    ]
    seen = []
    for scope in scopes:
        if scope not in seen:
            seen.append(scope)
    return seen


def get_localized_setting(name, language_id=None, store_id=None):
    """Resolve a setting, most specific scope first.

    Lookup order is store+language, language, store, global, and finally
    the application config default. Empty values fall through to the next
    scope.
    """
    try:
        rows = Setting.query.filter_by(name=name).all()
    except SQLAlchemyError as e:
        logger.error("Setting lookup %s failed: %s", name, e, exc_info=True)
        raise DataUnavailable('Settings are unavailable')
    by_scope = {(r.store_id, r.language_id): r.value for r in rows}

    for scope in _scopes(language_id, store_id):
        value = by_scope.get(scope)
        if value and value.strip():
            return value

    config_key = _CONFIG_DEFAULTS.get(name)
    if config_key:
        return current_app.config.get(config_key) or ''
    return ''
