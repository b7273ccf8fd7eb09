"""
Record Services Module

CRUD services for each business record type kept in the spreadsheet.
"""
from .base import RecordService, RecordValidationError, search_records
from .parties import CustomerService, SupplierService
from .settings import CompanySettingsService
from .transactions import PaymentService, ReceiptService
from .users import UserService

__all__ = [
    'RecordService',
    'RecordValidationError',
    'search_records',
    'CustomerService',
    'SupplierService',
    'UserService',
    'PaymentService',
    'ReceiptService',
    'CompanySettingsService',
]
