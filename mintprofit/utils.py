"""
Utility functions for the profit tracker.

All functions are pure helpers with no domain logic.
"""

from decimal import Decimal
from typing import Union


def format_ust(value: Union[Decimal, float, int], decimals: int = 2) -> str:
    """
    Format an amount as a UST string.

    Args:
        value: Amount in UST
        decimals: Number of decimal places (default: 2)

    Returns:
        Formatted string (e.g., "1,234.56 UST")
    """
    return f"{value:,.{decimals}f} UST"


def format_duration(seconds: float) -> str:
    """
    Format a duration as a short human-readable string.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted string (e.g., "2m 05s" or "12.3s")
    """
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}m {secs:02d}s"
