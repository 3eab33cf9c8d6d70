from sqlalchemy.exc import SQLAlchemyError
from backoffice.errors import DataUnavailable
from backoffice.models import Store
import logging

logger = logging.getLogger(__name__)


def get_all_stores():
    try:
        return Store.query.order_by(Store.display_order, Store.id).all()
    except SQLAlchemyError as e:
        logger.error("Store lookup failed: %s", e, exc_info=True)
        raise DataUnavailable('Stores are unavailable')


def get_stores_by_id():
    return {s.id: s for s in get_all_stores()}


def to_select_list(stores, all_label=None):
    items = [{'text': s.name, 'value': str(s.id)} for s in stores]
    if all_label:
        # 0 means "all stores" for the grid store filter.
        items.insert(0, {'text': all_label, 'value': '0'})
    return items
