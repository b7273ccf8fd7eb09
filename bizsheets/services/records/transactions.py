"""
Supplier payments and customer receipts.

A transaction settles part of an order (purchase order for payments, sales
order for receipts). It is append-only: once written it can be deleted but
not edited, and the spreadsheet recalculates the order and party balances.
"""
import logging
from typing import Any, Dict, Optional

from bizsheets.config_manager import RangeConfig
from bizsheets.services.sheets import NotFoundError, SheetsClient
from bizsheets.services.sheets.records import Record
from bizsheets.utils import format_sheet_date, to_number

from .base import RecordService, RecordValidationError

logger = logging.getLogger(__name__)


class TransactionService(RecordService):
    """
    Shared logic of payments and receipts.

    Subclasses name the party columns, the order columns and the amount column.
    """

    party_id_field = ""
    party_name_field = ""
    order_id_field = ""
    order_document_field = ""
    order_balance_field = ""
    amount_field = ""
    order_label = "order"
    party_label = "party"

    def __init__(
        self,
        client: SheetsClient,
        range_config: RangeConfig,
        party_config: RangeConfig,
        id_scheme: str = "uuid"
    ):
        super().__init__(client, range_config, id_scheme=id_scheme)
        if not range_config.lookup_range:
            raise ValueError(f"Range '{range_config.id}' needs a lookup_range for its orders")
        self.party_config = party_config

    @property
    def required_fields(self):
        return ['Trx ID', self.order_id_field]

    def list_orders(self, token: Optional[str] = None):
        return self.client.get_range(self.config.lookup_range, token=token)

    @staticmethod
    def _find(records, field: str, value: str, label: str) -> Record:
        for record in records:
            if record.get(field) == value:
                return record
        raise NotFoundError(f"Could not find {label} '{value}'")

    def prepare_new(self, data: Dict[str, Any], token: Optional[str] = None) -> Dict[str, Any]:
        data = super().prepare_new(data, token=token)
        data['Trx Date'] = format_sheet_date(data.get('Trx Date'))
        return data

    def create(self, data: Dict[str, Any], token: Optional[str] = None) -> Record:
        """
        Record a transaction against an order.

        Raises:
            RecordValidationError: Missing fields, non-positive amount, or an
                amount above the order's outstanding balance
            NotFoundError: Unknown order or party
        """
        data = self.prepare_new(data, token=token)
        self.validate(data)

        amount = to_number(data.get(self.amount_field))
        if not amount > 0:
            raise RecordValidationError(f"{self.amount_field} must be greater than 0.")

        orders, parties = self.client.get_ranges(
            [self.config.lookup_range, self.party_config.range],
            token=token
        )
        order = self._find(orders, self.order_id_field, data[self.order_id_field], self.order_label)

        balance = to_number(order.get(self.order_balance_field))
        if amount > balance:
            raise RecordValidationError(
                f"{self.amount_field} cannot be greater than the {self.order_balance_field}."
            )

        owner_id = order.get(self.party_id_field)
        party_id = data.get(self.party_id_field) or owner_id
        if owner_id and party_id != owner_id:
            raise RecordValidationError(
                f"{self.order_label.capitalize()} {data[self.order_id_field]} does not belong to "
                f"{self.party_label} {party_id}."
            )
        if not party_id:
            raise RecordValidationError(f"{self.party_id_field} is required.")
        party = self._find(parties, self.party_id_field, party_id, self.party_label)

        data.update({
            self.party_id_field: party_id,
            self.party_name_field: party.get(self.party_name_field, ""),
            'State': party.get('State', ""),
            'City': party.get('City', ""),
            self.order_document_field: order.get(self.order_document_field, ""),
            self.amount_field: amount,
        })

        row = self.to_row(data)
        self.client.append_row(self.config.range, row, token=token)
        logger.info(
            f"Recorded {self.label} {data['Trx ID']} of {amount} against "
            f"{self.order_label} {data[self.order_id_field]}"
        )
        return dict(zip(self.headers, row))

    def update(self, record_id: str, data: Dict[str, Any], token: Optional[str] = None) -> Record:
        raise RecordValidationError(
            f"Editing {self.label} {record_id} is not supported; delete it and record a new one."
        )


class PaymentService(TransactionService):
    headers = [
        'Trx Date', 'Trx ID', 'Supplier ID', 'Supplier Name', 'State', 'City',
        'PO ID', 'Bill Num', 'PMT Mode', 'Amount Paid',
    ]
    party_id_field = 'Supplier ID'
    party_name_field = 'Supplier Name'
    order_id_field = 'PO ID'
    order_document_field = 'Bill Num'
    order_balance_field = 'PO Balance'
    amount_field = 'Amount Paid'
    order_label = "purchase order"
    party_label = "supplier"
    label = "payment"


class ReceiptService(TransactionService):
    headers = [
        'Trx Date', 'Trx ID', 'Customer ID', 'Customer Name', 'State', 'City',
        'SO ID', 'Invoice Num', 'PMT Mode', 'Amount Received',
    ]
    party_id_field = 'Customer ID'
    party_name_field = 'Customer Name'
    order_id_field = 'SO ID'
    order_document_field = 'Invoice Num'
    order_balance_field = 'SO Balance'
    amount_field = 'Amount Received'
    order_label = "sales order"
    party_label = "customer"
    label = "receipt"
