"""
Generic record service over one sheet-backed range.

Creates append header-ordered rows, updates overwrite a bounded rectangle
of the record's row, deletes remove the row. Updates and deletes always
re-read the range first and resolve the row index from that fresh,
unfiltered read.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional

from bizsheets.config_manager import RangeConfig
from bizsheets.services.sheets import (
    IdGenerator,
    NotFoundError,
    SheetsClient,
    bounded_row_range,
    column_number,
    row_index_of,
)
from bizsheets.services.sheets.records import Record

logger = logging.getLogger(__name__)


class RecordValidationError(ValueError):
    """A record failed a business rule and was not sent to the sheet."""


def search_records(records: Iterable[Record], term: str, column: str = "All") -> List[Record]:
    """
    Case-insensitive substring filter.

    With ``column == "All"`` every value of the record is searched,
    joined by spaces. The result must not be used to compute row indices.
    """
    records = list(records)
    if not term:
        return records
    needle = term.lower()
    matches = []
    for record in records:
        if column == "All":
            haystack = " ".join("" if v is None else str(v) for v in record.values())
        else:
            value = record.get(column)
            haystack = "" if value is None else str(value)
        if needle in haystack.lower():
            matches.append(record)
    return matches


class RecordService:
    """
    CRUD over the records of one range.

    Subclasses declare ``headers`` (sheet column order) and
    ``required_fields``, and may override ``prepare_new`` / ``check_delete``.
    """

    headers: List[str] = []
    required_fields: List[str] = []
    label = "record"

    def __init__(
        self,
        client: SheetsClient,
        range_config: RangeConfig,
        id_scheme: str = "uuid"
    ):
        self.client = client
        self.config = range_config
        self.id_generator = IdGenerator(range_config.id_prefix, range_config.id_digits, id_scheme)

    @property
    def id_field(self) -> str:
        return self.config.id_field

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list(self, token: Optional[str] = None) -> List[Record]:
        """Fetch every record of the range, validating the header row."""
        return self.client.get_range(self.config.range, schema=self.headers, token=token)

    def search(
        self,
        term: str = "",
        column: str = "All",
        token: Optional[str] = None
    ) -> List[Record]:
        return search_records(self.list(token=token), term, column)

    def find(self, records: Iterable[Record], record_id: str) -> Record:
        for record in records:
            if record.get(self.id_field) == record_id:
                return record
        raise NotFoundError(f"Could not find {self.label} '{record_id}'")

    def new_id(self, records: Optional[Iterable[Record]] = None) -> str:
        existing = [r.get(self.id_field) for r in records or [] if r.get(self.id_field)]
        return self.id_generator.new_id(existing)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def validate(self, data: Dict[str, Any]) -> None:
        missing = [f for f in self.required_fields if data.get(f) in (None, "")]
        if missing:
            raise RecordValidationError(
                f"Please fill all required fields: {', '.join(missing)}"
            )

    def to_row(self, data: Dict[str, Any]) -> List[Any]:
        """Order ``data`` by the sheet's column headers; absent values become ''."""
        return [("" if data.get(h) is None else data.get(h)) for h in self.headers]

    def prepare_new(self, data: Dict[str, Any], token: Optional[str] = None) -> Dict[str, Any]:
        """Fill generated fields of a new record. Runs before validation."""
        data = dict(data)
        record_id = data.get(self.id_field)
        if record_id:
            # Rows are addressed by id, so a caller-chosen id must be unused
            if any(r.get(self.id_field) == record_id for r in self.list(token=token)):
                raise RecordValidationError(f"{self.label.capitalize()} '{record_id}' already exists.")
        else:
            records = self.list(token=token) if self.id_generator.scheme == "legacy" else []
            data[self.id_field] = self.new_id(records)
        return data

    def create(self, data: Dict[str, Any], token: Optional[str] = None) -> Record:
        """Append a new record and return it as written."""
        data = self.prepare_new(data, token=token)
        self.validate(data)
        row = self.to_row(data)
        self.client.append_row(self.config.range, row, token=token)
        logger.info(f"Created {self.label} {data[self.id_field]}")
        return dict(zip(self.headers, row))

    def editable_headers(self) -> List[str]:
        start = column_number(self.config.start_column)
        end = column_number(self.config.end_column)
        return self.headers[start - 1:end]

    def update_values(self, existing: Record, data: Dict[str, Any]) -> List[Any]:
        values = []
        for header in self.editable_headers():
            value = data[header] if header in data else existing.get(header)
            values.append("" if value is None else value)
        return values

    def update(self, record_id: str, data: Dict[str, Any], token: Optional[str] = None) -> Record:
        """
        Overwrite the editable columns of an existing record.

        Raises:
            NotFoundError: If ``record_id`` is not in the freshly read range
        """
        # The identifier is read-only once a record exists
        data = {k: v for k, v in data.items() if k != self.id_field}
        records = self.list(token=token)
        existing = self.find(records, record_id)
        merged = {**existing, **data}
        self.validate(merged)

        row_index = row_index_of(records, self.id_field, record_id)
        values = self.update_values(existing, data)
        range_ref = bounded_row_range(
            self.config.sheet, self.config.start_column, self.config.end_column, row_index
        )
        self.client.update_row(range_ref, values, token=token)
        logger.info(f"Updated {self.label} {record_id} at row {row_index}")

        updated = dict(existing)
        updated.update(zip(self.editable_headers(), values))
        return updated

    def check_delete(self, record: Record) -> None:
        """Raise RecordValidationError to refuse deleting ``record``."""

    def delete(self, record_id: str, token: Optional[str] = None) -> Record:
        """
        Delete a record's row. Rows below it shift up by one.

        Raises:
            NotFoundError: If ``record_id`` is not in the freshly read range
        """
        records = self.list(token=token)
        record = self.find(records, record_id)
        self.check_delete(record)

        row_index = row_index_of(records, self.id_field, record_id)
        self.client.delete_row(self.config.sheet, row_index, token=token)
        logger.info(f"Deleted {self.label} {record_id} from row {row_index}")
        return record
