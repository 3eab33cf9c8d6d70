from flask_login import current_user
from sqlalchemy.exc import SQLAlchemyError
from backoffice.errors import DataUnavailable
from backoffice.models import Language, LocaleStringResource
import logging
import re

logger = logging.getLogger(__name__)

# Used when a language has no resource of its own.
DEFAULT_RESOURCES = {
    'Common.Unspecified': 'Unspecified',
    'Admin.Common.StoresAll': 'All stores',
    'Admin.ReturnRequests.Accept.Caption': 'Accept return request',
    'Admin.ReturnRequests.Accepted': (
        'The return request has been accepted.'),
    'Enums.ReturnRequestStatus.PENDING': 'Pending',
    'Enums.ReturnRequestStatus.RECEIVED': 'Received',
    'Enums.ReturnRequestStatus.RETURN_AUTHORIZED': 'Return authorized',
    'Enums.ReturnRequestStatus.ITEMS_REPAIRED': 'Item(s) repaired',
    'Enums.ReturnRequestStatus.ITEMS_REFUNDED': 'Item(s) refunded',
    'Enums.ReturnRequestStatus.REQUEST_REJECTED': 'Request rejected',
    'Enums.ReturnRequestStatus.CANCELLED': 'Cancelled',
    'Enums.ProductType.SIMPLE': 'Simple product',
    'Enums.ProductType.GROUPED': 'Grouped product',
    'Enums.ProductType.BUNDLED': 'Bundled product',
}


def get_working_language_id():
    if current_user and getattr(current_user, 'is_authenticated', False):
        if current_user.language_id:
            return current_user.language_id
    try:
        language = Language.query.filter_by(is_default=True).first()
    except SQLAlchemyError as e:
        logger.error("Language lookup failed: %s", e, exc_info=True)
        raise DataUnavailable('Languages are unavailable')
    return language.id if language else None


def get_resource(name, language_id=None):
    if language_id:
        try:
            resource = LocaleStringResource.query.filter_by(
                language_id=language_id,
                resource_name=name
            ).first()
        except SQLAlchemyError as e:
            logger.error(
                "String resource lookup %s failed: %s", name, e,
                exc_info=True)
            raise DataUnavailable('String resources are unavailable')
        if resource:
            return resource.resource_value
    if name in DEFAULT_RESOURCES:
        return DEFAULT_RESOURCES[name]
    logger.debug("Missing string resource %s", name)
    return name


def _humanize(member_name):
    text = re.sub(r'_+', ' ', member_name).strip().lower()
    return text[:1].upper() + text[1:]


def get_localized_enum(member, language_id=None):
    key = f'Enums.{type(member).__name__}.{member.name}'
    value = get_resource(key, language_id)
    if value == key:
        return _humanize(member.name)
    return value
