"""
Foreign exchange service for currency normalization.

Rates are expressed relative to a base currency: ``rates["EUR"] == 0.92``
means one unit of base buys 0.92 EUR, so converting a EUR amount into
base divides by the rate.
"""
from decimal import Decimal, InvalidOperation
from typing import Dict, Mapping, Optional
import httpx
import logging
from walletpalz.core.config import settings

logger = logging.getLogger(__name__)

RateTable = Dict[str, Decimal]


def normalize_currency(value: str) -> str:
    """Upper-case and validate a 3-letter ISO 4217 currency code."""
    normalized = (value or "").strip().upper()
    if len(normalized) != 3 or not normalized.isalpha():
        raise ValueError("Currency must be a 3-letter ISO 4217 code.")
    return normalized


def fetch_rates(base_currency: str) -> RateTable:
    """
    Fetch the latest rate table for a base currency.

    Calls ``GET {FX_API_URL}/latest/{BASE}`` and parses the ``rates`` object.
    This is best effort: any network, HTTP or parse failure is logged and an
    empty table is returned, which makes every later conversion fall back to
    the unconverted amount.

    Args:
        base_currency: Currency code the rates are relative to

    Returns:
        Mapping of currency code to units of that currency per one unit of base
    """
    base_upper = base_currency.strip().upper()
    api_url = f"{settings.FX_API_URL.rstrip('/')}/latest/{base_upper}"
    logger.info(f"Fetching latest exchange rates for {base_upper}")

    try:
        response = httpx.get(api_url, timeout=settings.FX_TIMEOUT_SECONDS)
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPStatusError as e:
        logger.error(f"HTTP error from rate provider: {e.response.status_code} for {base_upper}")
        return {}
    except httpx.HTTPError as e:
        logger.error(f"Failed to fetch exchange rates for {base_upper}: {e}")
        return {}
    except ValueError as e:
        # Body was not valid JSON
        logger.error(f"Rate provider returned an unparseable response for {base_upper}: {e}")
        return {}

    if settings.DEBUG:
        logger.debug(f"Rate provider response: {data}")

    raw_rates = data.get("rates") if isinstance(data, dict) else None
    if not isinstance(raw_rates, dict):
        logger.error(f"Rate provider response for {base_upper} is missing 'rates'")
        return {}

    rates = parse_rates(raw_rates)
    logger.info(f"Loaded {len(rates)} exchange rates for {base_upper}")
    return rates


def parse_rates(raw_rates: Mapping[str, object]) -> RateTable:
    """Convert a raw ``{code: number}`` mapping to Decimals, dropping unusable entries."""
    rates: RateTable = {}
    for code, value in raw_rates.items():
        try:
            rate = Decimal(str(value))
        except (InvalidOperation, ValueError):
            logger.warning(f"Skipping non-numeric rate for {code}: {value!r}")
            continue
        if not rate.is_finite() or rate <= 0:
            logger.warning(f"Skipping invalid rate for {code}: {rate}")
            continue
        rates[str(code).upper()] = rate
    return rates


def to_base(amount, from_currency: Optional[str], rates: Optional[Mapping[str, Decimal]]) -> Decimal:
    """
    Convert an amount into the base currency of a rate table.

    A currency with no entry in ``rates`` (including an empty or missing
    table) is treated as already being in base and returned unconverted.
    """
    value = _coerce_amount(amount)
    if not rates or not from_currency:
        return value
    rate = rates.get(from_currency.strip().upper())
    if not rate:
        return value
    return value / rate


def _coerce_amount(amount) -> Decimal:
    if isinstance(amount, Decimal):
        return amount
    return Decimal(str(amount))
