"""Bill number extraction from vote motion titles."""

import re

# C- (House) or S- (Senate) bill, delimited by start/end, whitespace or commas.
BILL_NUMBER_PATTERN = re.compile(r"(?:^|[\s,]+)([CS]-\d+)(?:[\s,]|$)", re.IGNORECASE)


def extract_bill_number(title: str | None) -> str | None:
    """Return the first bill number mentioned in ``title``, uppercased.

    Args:
        title: Motion or bill title, e.g. ``"2nd reading of Bill C-69, An Act ..."``.

    Returns:
        The bill number (e.g. ``"C-69"``), or None when the title names none.

    Examples:
        >>> extract_bill_number("Bill c-12, third reading")
        'C-12'
        >>> extract_bill_number("Motion regarding BC-12") is None
        True
    """
    if not title:
        return None
    match = BILL_NUMBER_PATTERN.search(title)
    if match is None:
        return None
    return match.group(1).upper()
