"""
Google Sheets Service Module

Record store client and row <-> record helpers shared by all record services.
"""
from .auth import ServiceAccountTokenProvider, StaticTokenProvider
from .client import SheetsClient
from .errors import DecodeError, NotFoundError, RemoteError, SheetsError
from .records import (
    IdGenerator,
    bounded_row_range,
    column_letter,
    column_number,
    decode_records,
    generate_id,
    row_index_of,
)

__all__ = [
    'SheetsClient',
    'StaticTokenProvider',
    'ServiceAccountTokenProvider',
    'SheetsError',
    'RemoteError',
    'NotFoundError',
    'DecodeError',
    'IdGenerator',
    'bounded_row_range',
    'column_letter',
    'column_number',
    'decode_records',
    'generate_id',
    'row_index_of',
]
