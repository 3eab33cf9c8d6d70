from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from backoffice.errors import DataUnavailable
from backoffice.models import Currency
import logging

logger = logging.getLogger(__name__)

TAX_INCL_FORMAT = '{0} incl. tax'
TAX_EXCL_FORMAT = '{0} excl. tax'


@dataclass(frozen=True)
class CurrencyInfo:
    code: str
    symbol: Optional[str] = None
    rounding_decimals: int = 2


@dataclass(frozen=True)
class Money:
    """Display amount. Computed on demand, never persisted."""
    amount: Decimal
    currency: CurrencyInfo
    hide_currency: bool = False
    post_format: Optional[str] = None

    @property
    def rounded_amount(self):
        exp = Decimal(1).scaleb(-self.currency.rounding_decimals)
        return Decimal(self.amount).quantize(exp, rounding=ROUND_HALF_UP)

    def __str__(self):
        text = f'{self.rounded_amount:,}'
        if not self.hide_currency:
            if self.currency.symbol:
                text = f'{self.currency.symbol}{text}'
            else:
                text = f'{text} {self.currency.code}'
        if self.post_format:
            text = self.post_format.format(text)
        return text

    def to_dict(self):
        return {
            'amount': str(self.rounded_amount),
            'currency_code': self.currency.code,
            'formatted': str(self),
        }


def get_primary_currency():
    try:
        currency = Currency.query.filter_by(is_primary=True).first()
    except SQLAlchemyError as e:
        logger.error("Currency lookup failed: %s", e, exc_info=True)
        raise DataUnavailable('Currencies are unavailable')
    if currency:
        return CurrencyInfo(
            code=currency.code,
            symbol=currency.symbol,
            rounding_decimals=currency.rounding_decimals)

    code = current_app.config.get('PRIMARY_CURRENCY_CODE', 'USD')
    logger.warning("No primary currency configured, falling back to %s", code)
    return CurrencyInfo(code=code)


def get_tax_format(display_tax_suffix=True, price_includes_tax=True):
    if not display_tax_suffix:
        return None
    return TAX_INCL_FORMAT if price_includes_tax else TAX_EXCL_FORMAT
