"""
Monetary Amount Module

Parsing, validation and formatting of wallet amounts. Every amount that
reaches the ledger is a positive Decimal quantized to the configured number
of fractional digits. NEVER uses float for monetary values.
"""

from contextlib import contextmanager
from decimal import Decimal, Inexact, InvalidOperation, getcontext, localcontext
from typing import Any, Optional
import re

from .errors import InvalidAmount

# Set global decimal context for financial precision
getcontext().prec = 28

ZERO = Decimal('0')

# Digits available to balance arithmetic; amounts are capped at 28 digits by
# the global context, so sums of them stay far below this
LEDGER_PRECISION = 60

# Widest amount scale every backend stores exactly (PostgreSQL NUMERIC scale)
MAX_AMOUNT_PRECISION = 8

_STRIP_PATTERN = re.compile(r'[\s$€£¥]')


@contextmanager
def exact_arithmetic():
    """
    Decimal context for balance arithmetic
    
    Raises decimal.Inexact instead of rounding a result.
    """
    with localcontext() as ctx:
        ctx.prec = LEDGER_PRECISION
        ctx.traps[Inexact] = True
        yield ctx


def decimal_from_string(value: str) -> Decimal:
    """
    Safely convert string to Decimal, handling common formats
    
    Args:
        value: String representation of number, e.g. "$1,250.00" or "12,50"
        
    Returns:
        Decimal value
        
    Raises:
        InvalidAmount: If string cannot be converted to a Decimal
    """
    if not value or not isinstance(value, str):
        raise InvalidAmount("Amount must be a non-empty string", value)
    
    # Remove currency symbols and whitespace
    clean_value = _STRIP_PATTERN.sub('', value.strip())
    
    # Handle comma as decimal separator (European format)
    if ',' in clean_value and '.' in clean_value:
        # Both comma and dot - assume comma is thousands separator
        clean_value = clean_value.replace(',', '')
    elif ',' in clean_value and clean_value.count(',') == 1:
        parts = clean_value.split(',')
        if len(parts[1]) < 3:  # Decimal separator
            clean_value = clean_value.replace(',', '.')
        else:  # Thousands separator
            clean_value = clean_value.replace(',', '')
    elif ',' in clean_value:
        clean_value = clean_value.replace(',', '')
    
    try:
        return Decimal(clean_value)
    except InvalidOperation:
        raise InvalidAmount(f"Cannot convert '{value}' to an amount", value)


def to_amount(value: Any, precision: int = 2, max_amount: Optional[Decimal] = None) -> Decimal:
    """
    Validate a caller-supplied amount and normalize it to ledger precision
    
    Args:
        value: Decimal, int or numeric string
        precision: Number of fractional digits the ledger keeps
        max_amount: Optional per-transaction ceiling
        
    Returns:
        Positive Decimal quantized to ``precision`` places
        
    Raises:
        InvalidAmount: If the value is not a positive amount representable
            exactly at ``precision`` places, or exceeds ``max_amount``
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise InvalidAmount(
            f"Amount must be a Decimal, int or string, not {type(value).__name__}", value
        )
    
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, str):
        amount = decimal_from_string(value)
    else:
        raise InvalidAmount(f"Unsupported amount type {type(value).__name__}", value)
    
    if not amount.is_finite():
        raise InvalidAmount("Amount must be a finite number", value)
    
    if amount <= ZERO:
        raise InvalidAmount("Amount must be positive", value)
    
    quantum = Decimal('0.1') ** precision
    try:
        quantized = amount.quantize(quantum)
    except InvalidOperation:
        raise InvalidAmount("Amount is too large", value)
    
    # Refuse to round silently
    if quantized != amount:
        raise InvalidAmount(f"Amount has more than {precision} decimal places", value)
    
    if max_amount is not None and quantized > max_amount:
        raise InvalidAmount(f"Amount exceeds maximum of {max_amount}", value)
    
    return quantized


def format_amount(amount: Decimal, precision: int = 2) -> str:
    """Format for display"""
    return f"{amount:,.{precision}f}"
