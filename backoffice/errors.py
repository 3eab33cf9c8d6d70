from flask import jsonify
from backoffice.extensions import db
import logging

logger = logging.getLogger(__name__)


class BackofficeError(Exception):
    status_code = 500

    def __init__(self, message=None):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__


class InvalidArgument(BackofficeError):
    """Malformed paging, sort or filter input."""
    status_code = 400


class NotFound(BackofficeError):
    status_code = 404


class DataUnavailable(BackofficeError):
    """Repository or lookup failure. Never retried here."""
    status_code = 503


def register_error_handlers(app):

    @app.errorhandler(BackofficeError)
    def handle_backoffice_error(error):
        db.session.rollback()
        if error.status_code >= 500:
            logger.error("Request failed: %s", error.message)
        return jsonify({'error': error.message}), error.status_code
