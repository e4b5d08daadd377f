"""
Currency formatting with Babel.
"""
import logging
from typing import List

from babel import Locale, numbers

DEFAULT_LOCALE: str = 'en_IN'

CURRENCY_MAP: dict[str, str] = {
    'IN': 'INR',
    'US': 'USD',
    'GB': 'GBP',
    'DE': 'EUR',
    'FR': 'EUR',
    'ES': 'EUR',
    'IT': 'EUR',
    'NL': 'EUR',
    'AE': 'AED',
    'SA': 'SAR',
    'AU': 'AUD',
    'CA': 'CAD',
    'SG': 'SGD',
    'ZA': 'ZAR',
    'HU': 'HUF',
}

LOCALE_MAP: List[str] = [
    'en_IN',
    'hi_IN',
    'en_US',
    'en_GB',
    'de_DE',
    'fr_FR',
    'es_ES',
    'it_IT',
    'nl_NL',
    'ar_AE',
    'ar_SA',
    'en_AU',
    'en_CA',
    'en_SG',
    'en_ZA',
    'hu_HU',
]


def get_currency_from_locale(locale: str) -> str:
    """
    Retrieve the default currency code based on the locale's territory.

    Args:
        locale (str): Locale string, e.g. 'en_IN'.

    Returns:
        str: Currency code such as 'INR'. Defaults to 'INR' if the territory is unknown.
    """
    parts = locale.split('_')
    if len(parts) < 2:
        return 'INR'
    return CURRENCY_MAP.get(parts[1], 'INR')


def format_currency_value(value: float, locale: str) -> str:
    """
    Format a float as a currency string based on the locale's default currency.

    Args:
        value (float): The numeric value to be formatted.
        locale (str): Locale string, e.g. 'en_IN'.

    Returns:
        str: The formatted currency string, e.g. '₹500.00'.
    """
    if locale not in LOCALE_MAP:
        locale = DEFAULT_LOCALE
    try:
        currency_code = get_currency_from_locale(locale)
        return numbers.format_currency(value, currency=currency_code, locale=Locale.parse(locale))
    except Exception as e:
        logging.debug(f'Error formatting currency: {e}')
        return str(value)
