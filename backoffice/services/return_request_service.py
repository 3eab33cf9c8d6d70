from dataclasses import dataclass
from typing import Any, List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload
from backoffice.errors import DataUnavailable, InvalidArgument, NotFound
from backoffice.models import Customer, OrderItem, ReturnRequest
from backoffice.services.return_request_projection import (
    create_projection_context,
    project_detail_row,
    project_list_row,
)
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterClause:
    field: str
    operator: str
    value: Any


@dataclass(frozen=True)
class SortSpec:
    field: str
    direction: str = 'asc'


@dataclass
class ReturnRequestQuery:
    search_id: Optional[int] = None
    search_status_id: Optional[int] = None
    # 0 or None means all stores.
    search_store_id: Optional[int] = None
    page: int = 1
    page_size: int = 20
    sort: Optional[SortSpec] = None


@dataclass
class PagedResult:
    items: List[Any]
    total_count: int
    page: int
    page_size: int

    @property
    def pages(self):
        if not self.page_size:
            return 0
        return (self.total_count + self.page_size - 1) // self.page_size


FILTER_FIELDS = {
    'id': ReturnRequest.id,
    'status': ReturnRequest.return_request_status_id,
    'store': ReturnRequest.store_id,
    'customer': ReturnRequest.customer_id,
}

OPERATORS = {
    'eq': lambda column, value: column == value,
    'in': lambda column, value: column.in_(list(value)),
}

SORT_FIELDS = {
    'id': ReturnRequest.id,
    'created_on': ReturnRequest.created_on_utc,
    'updated_on': ReturnRequest.updated_on_utc,
    'quantity': ReturnRequest.quantity,
    'status': ReturnRequest.return_request_status_id,
    'store': ReturnRequest.store_id,
}

DEFAULT_SORT = SortSpec('created_on', 'desc')


def validate_query(query: ReturnRequestQuery) -> None:
    if query.page is None or query.page < 1:
        raise InvalidArgument('page must be 1 or greater')
    if query.page_size is None or query.page_size <= 0:
        raise InvalidArgument('page_size must be greater than 0')
    if query.sort is not None:
        if query.sort.field not in SORT_FIELDS:
            raise InvalidArgument(f'Cannot sort by {query.sort.field}')
        if query.sort.direction not in ('asc', 'desc'):
            raise InvalidArgument('sort direction must be asc or desc')


def build_filter_clauses(query: ReturnRequestQuery) -> List[FilterClause]:
    clauses = []
    if query.search_id is not None:
        clauses.append(FilterClause('id', 'eq', query.search_id))
    if query.search_status_id is not None:
        clauses.append(FilterClause('status', 'eq', query.search_status_id))
    if query.search_store_id:
        clauses.append(FilterClause('store', 'eq', query.search_store_id))
    return clauses


def apply_filter_clauses(sa_query, clauses):
    for clause in clauses:
        column = FILTER_FIELDS.get(clause.field)
        op = OPERATORS.get(clause.operator)
        if column is None or op is None:
            raise InvalidArgument(
                f'Unsupported filter {clause.field} {clause.operator}')
        sa_query = sa_query.filter(op(column, clause.value))
    return sa_query


def apply_sort(sa_query, sort: Optional[SortSpec]):
    sort = sort or DEFAULT_SORT
    column = SORT_FIELDS[sort.field]
    primary = column.desc() if sort.direction == 'desc' else column.asc()
    # Id tie-breaker keeps pages a stable partition.
    tie_breaker = (
        ReturnRequest.id.desc() if sort.direction == 'desc'
        else ReturnRequest.id.asc())
    if sort.field == 'id':
        return sa_query.order_by(primary)
    return sa_query.order_by(primary, tie_breaker)


def search_return_requests(query: ReturnRequestQuery, extra_clauses=()):
    """Return one page of return requests plus the unpaged match count.

    ``extra_clauses`` are ANDed with the clauses built from the query,
    so a caller-side store restriction narrows the store filter instead
    of replacing it.
    """
    validate_query(query)
    clauses = build_filter_clauses(query) + list(extra_clauses)

    base_query = ReturnRequest.query.options(
        joinedload(ReturnRequest.customer).joinedload(
            Customer.billing_address),
        joinedload(ReturnRequest.customer).joinedload(
            Customer.shipping_address),
    )
    filtered = apply_filter_clauses(base_query, clauses)

    try:
        pagination = apply_sort(filtered, query.sort).paginate(
            page=query.page,
            per_page=query.page_size,
            error_out=False,
        )
    except SQLAlchemyError as e:
        logger.error("Return request search failed: %s", e, exc_info=True)
        raise DataUnavailable('Return requests are unavailable')

    return PagedResult(
        items=list(pagination.items),
        total_count=pagination.total or 0,
        page=query.page,
        page_size=query.page_size,
    )


def load_order_items(order_item_ids):
    """Resolve order items with product and order in one query."""
    ids = sorted({i for i in order_item_ids if i})
    if not ids:
        return {}
    try:
        items = OrderItem.query.options(
            joinedload(OrderItem.product),
            joinedload(OrderItem.order),
        ).filter(OrderItem.id.in_(ids)).all()
    except SQLAlchemyError as e:
        logger.error("Order item lookup failed: %s", e, exc_info=True)
        raise DataUnavailable('Order items are unavailable')
    return {item.id: item for item in items}


def get_return_request(return_request_id):
    try:
        return_request = ReturnRequest.query.options(
            joinedload(ReturnRequest.customer).joinedload(
                Customer.billing_address),
            joinedload(ReturnRequest.customer).joinedload(
                Customer.shipping_address),
        ).filter(ReturnRequest.id == return_request_id).first()
    except SQLAlchemyError as e:
        logger.error(
            "Loading return request %s failed: %s",
            return_request_id,
            e,
            exc_info=True)
        raise DataUnavailable('Return requests are unavailable')
    if return_request is None:
        raise NotFound(f'Return request {return_request_id} not found')
    return return_request


def get_return_request_grid(query, context=None, extra_clauses=()):
    result = search_return_requests(query, extra_clauses)
    order_items = load_order_items(rr.order_item_id for rr in result.items)
    context = context or create_projection_context()
    rows = [
        project_list_row(rr, order_items.get(rr.order_item_id), context)
        for rr in result.items
    ]
    return PagedResult(
        items=rows,
        total_count=result.total_count,
        page=result.page,
        page_size=result.page_size,
    )


def get_return_request_detail(return_request_id, context=None):
    return_request = get_return_request(return_request_id)
    order_items = load_order_items([return_request.order_item_id])
    context = context or create_projection_context()
    return project_detail_row(
        return_request,
        order_items.get(return_request.order_item_id),
        context)
