"""Formatting utilities.

Pure functions for rendering values as engine arguments.
"""


def format_number(value: int | float) -> str:
    """Format a number without a trailing ".0" for integral values.

    Args:
        value: Number to format.

    Returns:
        "2" for 2.0, "1.25" for 1.25, "30" for 30.
    """
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
