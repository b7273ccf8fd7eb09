"""
Customers and suppliers.

Both sheets share one layout: seven editable columns (A:G) followed by three
totals that the spreadsheet recalculates from sales/purchases and
receipts/payments.
"""
from typing import Any, Dict, Optional

from bizsheets.utils import to_number

from .base import RecordService, RecordValidationError


class PartyService(RecordService):
    """Customer or supplier master data."""

    balance_field = ""
    computed_fields: list = []

    def prepare_new(self, data: Dict[str, Any], token: Optional[str] = None) -> Dict[str, Any]:
        data = super().prepare_new(data, token=token)
        for field in self.computed_fields:
            data[field] = 0
        return data

    def check_delete(self, record):
        if to_number(record.get(self.balance_field)) > 0:
            raise RecordValidationError(
                f"Cannot delete {self.label} with an outstanding balance."
            )


class CustomerService(PartyService):
    headers = [
        'Customer ID', 'Customer Name', 'Customer Contact', 'Customer Email',
        'State', 'City', 'Customer Address',
        'Total Sales', 'Total Receipts', 'Balance Receivable',
    ]
    required_fields = ['Customer ID', 'Customer Name', 'State', 'City']
    computed_fields = ['Total Sales', 'Total Receipts', 'Balance Receivable']
    balance_field = 'Balance Receivable'
    label = "customer"


class SupplierService(PartyService):
    headers = [
        'Supplier ID', 'Supplier Name', 'Supplier Contact', 'Supplier Email',
        'State', 'City', 'Supplier Address',
        'Total Purchases', 'Total Payments', 'Balance Payable',
    ]
    required_fields = ['Supplier ID', 'Supplier Name', 'State', 'City']
    computed_fields = ['Total Purchases', 'Total Payments', 'Balance Payable']
    balance_field = 'Balance Payable'
    label = "supplier"
