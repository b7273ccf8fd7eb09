"""
Row <-> record mapping helpers.

A fetched range is a matrix whose first row holds the column headers. Each
following row becomes a record keyed by those headers, positionally. Row
indices are 1-based and count the header, so the record at list position
``i`` lives on sheet row ``i + 2``.
"""
import random
import string
import uuid
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .errors import DecodeError, NotFoundError

Record = Dict[str, Optional[str]]

# First data row of a sheet whose header sits on row 1
FIRST_DATA_ROW = 2


def decode_records(
    values: Any,
    schema: Optional[Sequence[str]] = None
) -> List[Record]:
    """
    Convert a ``values`` matrix into a list of header-keyed records.

    Args:
        values: Row matrix as returned by the values endpoint (header first)
        schema: Optional expected header names. The fetched header must
            start with exactly these names; trailing extra columns are allowed.

    Returns:
        List of records. Empty when there is no header or no data row.

    Raises:
        DecodeError: If ``values`` is not a list of lists or the header
            does not match ``schema``
    """
    if values is None:
        return []
    if not isinstance(values, list) or not all(isinstance(row, list) for row in values):
        raise DecodeError("Expected 'values' to be a list of rows")
    if not values:
        return []

    headers, rows = values[0], values[1:]

    if schema is not None:
        expected = list(schema)
        actual = [str(h) for h in headers[:len(expected)]]
        if actual != expected:
            raise DecodeError(
                f"Header mismatch: expected {expected}, got {[str(h) for h in headers]}"
            )

    records = []
    for row in rows:
        record = {}
        for index, header in enumerate(headers):
            record[str(header)] = row[index] if index < len(row) else None
        records.append(record)
    return records


def row_index_of(records: Sequence[Record], id_field: str, record_id: str) -> int:
    """
    Return the 1-based sheet row of the record whose ``id_field`` equals ``record_id``.

    ``records`` must be the unfiltered collection exactly as fetched.

    Raises:
        NotFoundError: If no record carries that identifier
    """
    for position, record in enumerate(records):
        if record.get(id_field) == record_id:
            return position + FIRST_DATA_ROW
    raise NotFoundError(f"No record with {id_field} '{record_id}'")


def column_letter(number: int) -> str:
    """Convert a 1-based column number to its A1 letter (1 -> A, 27 -> AA)."""
    if number < 1:
        raise ValueError(f"Column number must be >= 1, got {number}")
    letters = ""
    while number:
        number, remainder = divmod(number - 1, 26)
        letters = string.ascii_uppercase[remainder] + letters
    return letters


def column_number(letters: str) -> int:
    """Convert an A1 column letter to its 1-based number (A -> 1, AA -> 27)."""
    if not letters or not letters.isalpha():
        raise ValueError(f"Invalid column letters: {letters!r}")
    number = 0
    for char in letters.upper():
        number = number * 26 + (ord(char) - ord("A") + 1)
    return number


def quote_sheet_name(sheet_name: str) -> str:
    # A1 notation needs quotes around names that are not plain identifiers
    if sheet_name.replace("_", "").isalnum():
        return sheet_name
    return "'" + sheet_name.replace("'", "''") + "'"


def bounded_row_range(sheet_name: str, start_column: str, end_column: str, row_index: int) -> str:
    """Build a single-row A1 range such as ``Customers!A3:G3``."""
    if row_index < FIRST_DATA_ROW:
        raise ValueError(f"Row index must be >= {FIRST_DATA_ROW}, got {row_index}")
    sheet = quote_sheet_name(sheet_name)
    return f"{sheet}!{start_column}{row_index}:{end_column}{row_index}"


def generate_id(
    prefix: str,
    digits: int,
    existing: Iterable[str] = (),
    rng: Optional[random.Random] = None
) -> str:
    """
    Generate ``prefix`` + ``digits`` random digits not present in ``existing``.

    Uniqueness is only checked against the ids the caller has loaded; two
    writers working from the same snapshot can still pick the same id.
    """
    rng = rng or random.SystemRandom()
    taken = set(existing)
    low, high = 10 ** (digits - 1), 10 ** digits - 1
    in_space = [
        t for t in taken
        if t.startswith(prefix) and t[len(prefix):].isdigit() and len(t) == len(prefix) + digits
    ]
    if len(in_space) >= high - low + 1:
        raise ValueError(f"Identifier space for prefix '{prefix}' is exhausted")
    while True:
        candidate = f"{prefix}{rng.randint(low, high)}"
        if candidate not in taken:
            return candidate


class IdGenerator:
    """
    Identifier factory for one record type.

    Schemes:
        uuid:   prefix + 10 upper-case hex characters of a UUID4
        legacy: prefix + fixed-width random digits, checked against loaded ids
    """

    SCHEMES = ("uuid", "legacy")

    def __init__(self, prefix: str, digits: int, scheme: str = "uuid"):
        if scheme not in self.SCHEMES:
            raise ValueError(f"Unknown id scheme '{scheme}', expected one of {self.SCHEMES}")
        self.prefix = prefix
        self.digits = digits
        self.scheme = scheme

    def new_id(self, existing: Iterable[str] = ()) -> str:
        if self.scheme == "legacy":
            return generate_id(self.prefix, self.digits, existing)
        taken = set(existing)
        while True:
            candidate = f"{self.prefix}{uuid.uuid4().hex[:10].upper()}"
            if candidate not in taken:
                return candidate
