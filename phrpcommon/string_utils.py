# Copyright (C) 2025  Technische Universitaet Berlin
#
# This library is free software; you can redistribute it and/or
# modify it under the terms of the GNU Lesser General Public
# License as published by the Free Software Foundation; either
# version 3 of the License, or (at your option) any later version.
#
# This library is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU
# Lesser General Public License for more details.
#
# You should have received a copy of the GNU Lesser General Public
# License along with this library; if not, write to the Free Software
# Foundation, Inc., 51 Franklin Street, Fifth Floor, Boston, MA  02110-1301
# USA

"""Module with helpers for parsing and formatting text fields."""
import re

_re_letter = re.compile('^[A-Za-z]$')


def cint_safe(value, default):
    """
    Convert a string to an int, returning a default if that is not possible.

    The value is parsed as float first and then rounded, so that "8.000" gives 8.

    :param value: (str) text to convert
    :param default: (int) value returned if value is not numeric
    """
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if number != number or number in (float('inf'), float('-inf')):
        return default
    return int(round(number))


def cdbl_safe(value, default):
    """Convert a string to a float, returning default on failure."""
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


# single and double precision are the same thing in python
csng_safe = cdbl_safe


def collapse_list(fields):
    """Join fields with tabs."""
    return '\t'.join(str(f) for f in fields)


def is_letter_a_to_z(character):
    """Return True if character is a single letter A-Z (either case)."""
    if not character:
        return False
    return _re_letter.match(character) is not None


def _common_start(string1, string2, case_sensitive):
    # string1 is the shorter of the two
    if len(string2) < len(string1):
        string1, string2 = string2, string1
    if case_sensitive:
        cmp1, cmp2 = string1, string2
    else:
        cmp1, cmp2 = string1.lower(), string2.lower()
    length = 0
    while length < len(cmp1) and cmp1[length] == cmp2[length]:
        length += 1
    return string1[:length]


def longest_common_string_from_start(items, case_sensitive=False):
    """
    Find the longest text that all items start with.

    :param items: (list of str) strings to compare
    :param case_sensitive: (bool) compare case-sensitive
    :return: the common start; for a single item that item, for no items an empty string
    """
    items = list(items)
    if len(items) == 0:
        return ''
    if len(items) == 1:
        return items[0]

    longest = items[0] or ''
    for item in items[1:]:
        longest = _common_start(longest, item or '', case_sensitive)
        if len(longest) == 0:
            return ''
    return longest


def dbl_to_string(value, digits_after_decimal, threshold=0.0):
    """
    Format a number with at most digits_after_decimal decimals and no trailing zeros.

    :param value: (float) value to format
    :param digits_after_decimal: (int) number of decimals to round to
    :param threshold: (float) values with a smaller magnitude are written as "0"
    """
    if abs(value) < threshold:
        return '0'
    text = '%.*f' % (digits_after_decimal, value)
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    if text in ('-0', ''):
        return '0'
    return text


def mass_error_to_string(mass_error_da):
    """Format a mass error in Da, using more digits for very small errors."""
    if abs(mass_error_da) < 0.000001:
        return '0'
    if abs(mass_error_da) < 0.0001:
        return dbl_to_string(mass_error_da, 6, 0.0000001)
    return dbl_to_string(mass_error_da, 5, 0.000001)


def trim_zero(value_text):
    """Replace "0.0" with "0"."""
    return '0' if value_text == '0.0' else value_text


def trim_zero_if_not_first_id(result_id, value_text):
    """Apply trim_zero to all but the first result."""
    return trim_zero(value_text) if result_id > 1 else value_text
