# rakhimart/services/stock_guard.py
from rakhimart.core.errors import StockCheck


def can_increase(current_quantity: int, delta: int, stock_ceiling: int, is_out_of_stock: bool) -> StockCheck:
    """
    Checked before every quantity-increasing cart mutation (never for decreases or removals).
    Out-of-stock products are unavailable whatever the delta.
    """
    if is_out_of_stock or stock_ceiling <= 0:
        return StockCheck.STOCK_UNAVAILABLE
    if current_quantity + delta > stock_ceiling:
        return StockCheck.STOCK_LIMIT_EXCEEDED
    return StockCheck.ALLOWED
