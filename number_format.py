#!/usr/bin/env python3
"""
Number Formatting
Helpers for the price/commission inputs, which show '.' as the thousands separator.
"""

import re

_NOT_NUMERIC = re.compile(r'[^\d.]')
_THOUSANDS = re.compile(r'\B(?=(\d{3})+(?!\d))')
_LEADING_INT = re.compile(r'\s*([+-]?\d+)')


def format_number(value: str) -> str:
    """
    Format raw input with '.' thousand separators, e.g. "1234567" -> "1.234.567".

    Anything other than digits and '.' is dropped. The text before the first
    '.' is the integer part and the text up to the second '.' is kept as the
    decimal part.
    """
    clean_value = _NOT_NUMERIC.sub('', value)
    parts = clean_value.split('.')
    integer = parts[0]
    formatted_integer = _THOUSANDS.sub('.', integer)
    if len(parts) > 1:
        return f"{formatted_integer}.{parts[1]}"
    return formatted_integer


def _leading_int(value: str):
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


def parse_formatted_number(value: str) -> int:
    """Turn formatted text back into a number; every '.' is a separator. Unparseable -> 0."""
    number = _leading_int(value.replace('.', ''))
    return number or 0


def parse_number_input(value: str) -> int:
    """Whole, non-negative number from a numeric input box. Empty or unparseable -> 0."""
    if value == '':
        return 0
    number = _leading_int(value)
    if number is None:
        return 0
    return max(number, 0)
