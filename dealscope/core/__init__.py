"""
Core dashboard state: raw CRM rows, the deals derived from them and logging.
"""

from .entities import Deal, DealField, ROW_ID_KEY, Row
from .deal_model import DealModel
from .row_store import RowStore

__all__ = ["Deal", "DealField", "ROW_ID_KEY", "Row", "DealModel", "RowStore"]
