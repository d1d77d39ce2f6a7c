import re
from decimal import Decimal, InvalidOperation

def validate_email(email):
    """
    Validate email address format.
    
    Args:
        email: Email address to validate
        
    Returns:
        bool: True if valid, False otherwise
    """
    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return bool(re.match(pattern, email or ''))

def validate_amount(amount):
    """
    Validate a decimal money amount such as "49.99".
    
    Args:
        amount: Amount as a string or number
        
    Returns:
        bool: True if it is a positive amount with at most two decimals
    """
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        return False
    if not value.is_finite() or value <= 0:
        return False
    return value.as_tuple().exponent >= -2

def normalize_otp(value):
    """Strip everything that is not a digit (spaces from auto-formatting etc.)."""
    return re.sub(r'\D', '', value or '')
