"""
Google Sheets Record Store Client

Reads, appends, updates and deletes rows of a single spreadsheet through the
Sheets API v4 REST endpoints.
"""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote

import requests

from .auth import StaticTokenProvider, TokenProvider
from .errors import DecodeError, NotFoundError, RemoteError
from .records import FIRST_DATA_ROW, Record, decode_records

logger = logging.getLogger(__name__)


class SheetsClient:
    """
    Stateless record store client for one spreadsheet.

    Features:
    - Header-keyed record decoding with optional header schema checks
    - Single-row append / bounded update / row delete
    - Concurrent all-or-nothing multi-range reads
    - Sheet name -> sheetId cache with explicit invalidation

    The access token is obtained on every operation, either from the
    ``token`` argument or from ``token_provider``. It is never stored.
    Nothing is retried: a failed call raises and leaves no local state behind.
    """

    BASE_URL = "https://sheets.googleapis.com/v4/spreadsheets"
    VALUE_INPUT_OPTION = "USER_ENTERED"

    def __init__(
        self,
        spreadsheet_id: str,
        token_provider: Optional[TokenProvider] = None,
        session: Optional[requests.Session] = None,
        request_timeout: Optional[float] = None,
        cache_sheet_ids: bool = True,
        max_workers: int = 4
    ):
        """
        Initialize the record store client.

        Args:
            spreadsheet_id: Google Sheets spreadsheet ID
            token_provider: Callable returning a bearer token. Defaults to
                the SHEETS_ACCESS_TOKEN environment variable.
            session: Optional requests session (shared connection pool)
            request_timeout: Per-request timeout in seconds; None keeps the
                transport default
            cache_sheet_ids: Keep resolved sheet ids for the client's lifetime
            max_workers: Thread pool size for concurrent range reads
        """
        if not spreadsheet_id:
            raise ValueError("spreadsheet_id is required")
        self.spreadsheet_id = spreadsheet_id
        self.token_provider = token_provider or StaticTokenProvider()
        self.session = session or requests.Session()
        self.request_timeout = request_timeout
        self.cache_sheet_ids = cache_sheet_ids
        self.max_workers = max_workers
        self._sheet_ids: Dict[str, int] = {}
        self._sheet_ids_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _token(self, token: Optional[str]) -> str:
        return token if token else self.token_provider()

    def _values_url(self, range_ref: str, suffix: str = "") -> str:
        encoded = quote(range_ref, safe="!:$'")
        return f"{self.BASE_URL}/{self.spreadsheet_id}/values/{encoded}{suffix}"

    def _call_api(
        self,
        method: str,
        url: str,
        token: str,
        **kwargs
    ) -> Dict[str, Any]:
        """
        Issue one request and return the decoded JSON body.

        Raises:
            RemoteError: On any non-2xx status, carrying the backend message
            DecodeError: If a successful body is not a JSON object
        """
        headers = {"Authorization": f"Bearer {token}"}
        if "json" in kwargs:
            headers["Content-Type"] = "application/json"

        logger.info(f"Calling Sheets API: {method} {url}")
        response = self.session.request(
            method,
            url,
            headers=headers,
            timeout=self.request_timeout,
            **kwargs
        )

        if not 200 <= response.status_code < 300:
            message = self._error_message(response)
            logger.error(f"Sheets API error: {response.status_code} at {url}: {message}")
            raise RemoteError(message, status_code=response.status_code)

        try:
            body = response.json()
        except ValueError as e:
            raise DecodeError(f"Response from {url} is not valid JSON") from e
        if not isinstance(body, dict):
            raise DecodeError(f"Response from {url} is not a JSON object")
        return body

    @staticmethod
    def _error_message(response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict) and error.get("message"):
                return error["message"]
        return response.text or f"HTTP {response.status_code}"

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_values(self, range_ref: str, token: Optional[str] = None) -> List[List[Any]]:
        """
        Fetch the raw row matrix of a range (no header handling).

        Returns:
            List of rows; empty when the range holds no values
        """
        body = self._call_api("GET", self._values_url(range_ref), self._token(token))
        values = body.get("values", [])
        if not isinstance(values, list) or not all(isinstance(row, list) for row in values):
            raise DecodeError(f"Unexpected 'values' shape for range {range_ref}")
        return values

    def get_range(
        self,
        range_ref: str,
        schema: Optional[Sequence[str]] = None,
        token: Optional[str] = None
    ) -> List[Record]:
        """
        Fetch a range and decode it into header-keyed records.

        Args:
            range_ref: Defined name or A1 range whose first row is the header
            schema: Optional expected header names (see ``decode_records``)
            token: Explicit bearer token for this call

        Returns:
            List of records, one per data row
        """
        values = self.get_values(range_ref, token=token)
        records = decode_records(values, schema=schema)
        logger.info(f"Read {len(records)} records from {range_ref}")
        return records

    def get_ranges(
        self,
        range_refs: Sequence[str],
        schemas: Optional[Sequence[Optional[Sequence[str]]]] = None,
        token: Optional[str] = None
    ) -> List[List[Record]]:
        """
        Fetch several ranges concurrently and return them in request order.

        The reads are joined: if any one fails, the first failure is raised
        and none of the results are returned.
        """
        if schemas is None:
            schemas = [None] * len(range_refs)
        if len(schemas) != len(range_refs):
            raise ValueError("schemas must match range_refs in length")

        token = self._token(token)
        workers = max(1, min(self.max_workers, len(range_refs)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(self.get_range, range_ref, schema, token)
                for range_ref, schema in zip(range_refs, schemas)
            ]
            return [future.result() for future in futures]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def append_row(
        self,
        range_ref: str,
        values: Sequence[Any],
        token: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Append exactly one row after the last row of ``range_ref``.

        ``values`` must already be in the sheet's column order.
        """
        url = self._values_url(range_ref, ":append")
        body = {"values": [list(values)]}
        logger.info(f"Appending 1 row to {range_ref}")
        return self._call_api(
            "POST",
            url,
            self._token(token),
            params={"valueInputOption": self.VALUE_INPUT_OPTION},
            json=body
        )

    def update_row(
        self,
        range_ref: str,
        values: Sequence[Any],
        token: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Overwrite the cells of a bounded single-row range such as ``Customers!A3:G3``.
        """
        url = self._values_url(range_ref)
        body = {"values": [list(values)]}
        logger.info(f"Updating range {range_ref}")
        return self._call_api(
            "PUT",
            url,
            self._token(token),
            params={"valueInputOption": self.VALUE_INPUT_OPTION},
            json=body
        )

    def batch_update(
        self,
        requests: List[Dict[str, Any]],
        token: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Execute batch update requests on the spreadsheet.

        Args:
            requests: List of update request objects
            token: Explicit bearer token for this call

        Returns:
            API response dictionary
        """
        url = f"{self.BASE_URL}/{self.spreadsheet_id}:batchUpdate"
        logger.info(f"Executing {len(requests)} batch update requests")
        return self._call_api("POST", url, self._token(token), json={"requests": requests})

    def delete_row(
        self,
        sheet_name: str,
        row_index: int,
        token: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Delete one row of a sheet; every row below it shifts up by one.

        Args:
            sheet_name: Tab title (not a defined range name)
            row_index: 1-based, header-inclusive row number

        Raises:
            NotFoundError: If no sheet has that title
            RemoteError: If the metadata or the delete request fails
        """
        if row_index < FIRST_DATA_ROW:
            raise ValueError(f"Row index must be >= {FIRST_DATA_ROW}, got {row_index}")

        token = self._token(token)
        sheet_id = self.get_sheet_id(sheet_name, token=token)
        request = {
            "deleteDimension": {
                "range": {
                    "sheetId": sheet_id,
                    "dimension": "ROWS",
                    "startIndex": row_index - 1,
                    "endIndex": row_index,
                }
            }
        }
        logger.info(f"Deleting row {row_index} from sheet '{sheet_name}'")
        return self.batch_update([request], token=token)

    # ------------------------------------------------------------------
    # Sheet id resolution
    # ------------------------------------------------------------------

    def get_sheet_ids(self, token: Optional[str] = None) -> Dict[str, int]:
        """Fetch the title -> sheetId map of every tab in the spreadsheet."""
        url = f"{self.BASE_URL}/{self.spreadsheet_id}"
        body = self._call_api("GET", url, self._token(token), params={"fields": "sheets.properties"})

        sheets = body.get("sheets", [])
        if not isinstance(sheets, list):
            raise DecodeError("Unexpected 'sheets' shape in spreadsheet metadata")

        sheet_ids = {}
        for sheet in sheets:
            properties = sheet.get("properties") if isinstance(sheet, dict) else None
            if not isinstance(properties, dict) or "title" not in properties:
                raise DecodeError("Sheet entry without properties.title in metadata")
            sheet_ids[properties["title"]] = properties.get("sheetId", 0)
        return sheet_ids

    def get_sheet_id(self, sheet_name: str, token: Optional[str] = None) -> int:
        """
        Resolve a tab title to its numeric sheetId (case-sensitive exact match).

        With caching enabled a name already seen is answered locally; an
        unknown name triggers one metadata refresh before giving up.
        """
        if self.cache_sheet_ids:
            with self._sheet_ids_lock:
                if sheet_name in self._sheet_ids:
                    return self._sheet_ids[sheet_name]

        sheet_ids = self.get_sheet_ids(token=token)

        if self.cache_sheet_ids:
            with self._sheet_ids_lock:
                self._sheet_ids = dict(sheet_ids)

        if sheet_name not in sheet_ids:
            raise NotFoundError(f'Sheet with name "{sheet_name}" not found.')
        return sheet_ids[sheet_name]

    def invalidate_sheet_ids(self) -> None:
        """Forget cached sheet ids, e.g. after tabs were renamed or removed."""
        with self._sheet_ids_lock:
            self._sheet_ids.clear()
        logger.info("Cleared sheet id cache")
