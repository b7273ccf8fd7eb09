"""
External Service Integrations

Available Services:
- Google Sheets: record store client (``bizsheets.services.sheets``)
- Records: customers, suppliers, users, payments, receipts and company
  settings built on the record store (``bizsheets.services.records``)

Usage:
    from bizsheets.services.sheets import SheetsClient
    from bizsheets.services.records import CustomerService
"""
from .sheets import SheetsClient

__all__ = [
    'SheetsClient',
]
