"""
List Pricing.

Fee split and price validation for paid lists. All amounts are integers
in the smallest currency unit (cents, or yen for JPY). Values come from
config/settings/payments.yaml.
"""

from dataclasses import dataclass

from snack.backend.core.config import get_app_config


@dataclass(frozen=True)
class PricingBreakdown:
    amount: int
    platform_fee: int
    creator_earnings: int


def calculate_pricing(amount: int) -> PricingBreakdown:
    """Split a sale into the platform fee and the creator's share."""
    fee_rate = get_app_config().payments.platform_fee_percentage
    platform_fee = round(amount * fee_rate)
    return PricingBreakdown(
        amount=amount,
        platform_fee=platform_fee,
        creator_earnings=amount - platform_fee,
    )


def is_list_free(price_cents: int | None) -> bool:
    return price_cents is None or price_cents == 0


def validate_price(price_cents: int | None) -> str | None:
    """
    Validate a list price.

    Returns:
        None when valid (free or within bounds), otherwise the reason.
    """
    if is_list_free(price_cents):
        return None

    payments = get_app_config().payments
    if price_cents < payments.min_price_cents:
        return f"Price must be at least {format_currency(payments.min_price_cents, payments.default_currency)}"
    if price_cents > payments.max_price_cents:
        return f"Price must be at most {format_currency(payments.max_price_cents, payments.default_currency)}"
    return None


def validate_currency(currency: str | None) -> bool:
    if not currency:
        return False
    return currency.lower() in get_app_config().payments.currencies


def format_currency(amount: int, currency: str) -> str:
    """Format an amount in minor units, e.g. 499 usd -> "$4.99", 500 jpy -> "¥500"."""
    info = get_app_config().payments.currencies.get(currency.lower())
    if info is None:
        return f"{amount / 100:.2f} {currency.upper()}"
    if info.decimals == 0:
        return f"{info.symbol}{amount:,}"
    major = amount / (10 ** info.decimals)
    return f"{info.symbol}{major:,.{info.decimals}f}"


def format_list_price(price_cents: int | None, currency: str) -> str:
    if is_list_free(price_cents):
        return "Free"
    return format_currency(price_cents, currency)
