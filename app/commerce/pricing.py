# app/commerce/pricing.py
"""
Price display helpers.

Amounts coming from the commerce backend are integers in minor units
(1/100 of the currency unit). Formatting divides by 100 and renders the
result for a locale; nothing here rounds or computes totals.

    >>> format_price(150000, "IDR")
    'IDR 1,500'
    >>> format_price(1999, "usd")
    '$19.99'
    >>> format_price(150000, "IDR", locale="id-ID")
    'Rp 1.500'
"""

from decimal import ROUND_HALF_EVEN, Decimal

from app.commerce.schemas import Product, ProductVariant

MINOR_UNITS_PER_MAJOR = 100
DEFAULT_CURRENCY = "usd"
DEFAULT_LOCALE = "en-US"

# Currencies displayed without fraction digits
ZERO_FRACTION_CURRENCIES: frozenset[str] = frozenset(
    {"IDR", "JPY", "KRW", "VND", "CLP", "ISK", "HUF", "TWD", "UGX"}
)

# (group separator, decimal separator, symbols known to this locale)
LOCALES: dict[str, tuple[str, str, dict[str, str]]] = {
    "en-US": (",", ".", {"USD": "$", "EUR": "€", "GBP": "£"}),
    "id-ID": (".", ",", {"IDR": "Rp", "USD": "US$"}),
}


def fraction_digits(currency_code: str) -> int:
    return 0 if currency_code.upper() in ZERO_FRACTION_CURRENCIES else 2


def _group(integer_part: str, separator: str) -> str:
    head = len(integer_part) % 3 or 3
    groups = [integer_part[:head]]
    groups += [integer_part[i : i + 3] for i in range(head, len(integer_part), 3)]
    return separator.join(groups)


def format_price(
    amount: int,
    currency_code: str = DEFAULT_CURRENCY,
    locale: str = DEFAULT_LOCALE,
) -> str:
    """
    Format `amount` (minor units) for display in `currency_code`.

    Unknown locales fall back to en-US. Currencies without a symbol in
    the locale are prefixed with their ISO code followed by a space.
    """
    code = currency_code.upper()
    group_sep, decimal_sep, symbols = LOCALES.get(locale, LOCALES[DEFAULT_LOCALE])
    digits = fraction_digits(code)

    major = Decimal(amount) / MINOR_UNITS_PER_MAJOR
    quantum = Decimal(1).scaleb(-digits)
    major = major.quantize(quantum, rounding=ROUND_HALF_EVEN)

    sign = "-" if major < 0 else ""
    text = f"{abs(major):.{digits}f}"
    integer_part, _, fraction = text.partition(".")
    number = _group(integer_part, group_sep)
    if digits:
        number = f"{number}{decimal_sep}{fraction}"

    symbol = symbols.get(code)
    if symbol is None:
        return f"{sign}{code} {number}"
    if symbol.isalpha() or (len(symbol) > 1 and symbol.endswith("$")):
        return f"{sign}{symbol} {number}"
    return f"{sign}{symbol}{number}"


def variant_price(variant: ProductVariant, currency_code: str = DEFAULT_CURRENCY) -> int | None:
    """Price of a variant in the given currency, or None if not priced."""
    wanted = currency_code.lower()
    for price in variant.prices:
        if price.currency_code.lower() == wanted:
            return price.amount
    return None


def cheapest_variant(
    product: Product,
    currency_code: str = DEFAULT_CURRENCY,
) -> ProductVariant | None:
    """The lowest-priced variant in the currency; ties keep the first."""
    cheapest: ProductVariant | None = None
    cheapest_price: int | None = None
    for variant in product.variants:
        price = variant_price(variant, currency_code)
        if price is not None and (cheapest_price is None or price < cheapest_price):
            cheapest, cheapest_price = variant, price
    return cheapest
