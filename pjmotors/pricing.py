from typing import Optional


def derive_profit(purchase: float, sale: Optional[float]) -> Optional[float]:
    """Profit in AUD, or None while the car is unsold."""
    if sale is None:
        return None
    return round(float(sale) - float(purchase), 2)
