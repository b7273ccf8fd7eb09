# Shared pytest fixtures: an in-memory stand-in for the Sheets API v4 REST endpoints
from __future__ import annotations

import copy
import re
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import unquote

import pytest

from bizsheets.config_manager import ConfigManager
from bizsheets.services.sheets import SheetsClient

SPREADSHEET_ID = "test-spreadsheet"
TOKEN = "test-token"
ROOT = Path(__file__).resolve().parents[1]

A1_RANGE = re.compile(r"^(?:'((?:[^']|'')+)'|([^!]+))!([A-Z]+)(\d+):([A-Z]+)(\d+)$")


def _col(letters: str) -> int:
    number = 0
    for char in letters:
        number = number * 26 + ord(char) - ord("A") + 1
    return number


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: Optional[str] = None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else ("" if payload is None else str(payload))

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeSheetsBackend:
    """Implements the handful of endpoints SheetsClient uses, over in-memory rows."""

    def __init__(self, spreadsheet_id: str = SPREADSHEET_ID):
        self.base = f"https://sheets.googleapis.com/v4/spreadsheets/{spreadsheet_id}"
        self.sheets: Dict[str, Dict[str, Any]] = {}
        self.named_ranges: Dict[str, str] = {}
        self.calls: List[Dict[str, Any]] = []
        self.failures: List[Dict[str, Any]] = []
        self.raw_responses: List[FakeResponse] = []
        self._lock = threading.Lock()
        self._next_sheet_id = 1000

    # -- setup helpers ---------------------------------------------------

    def add_sheet(self, title: str, rows: List[List[Any]], range_name: Optional[str] = None,
                  sheet_id: Optional[int] = None) -> None:
        if sheet_id is None:
            sheet_id = self._next_sheet_id
            self._next_sheet_id += 1
        self.sheets[title] = {"sheetId": sheet_id, "rows": copy.deepcopy(rows)}
        if range_name:
            self.named_ranges[range_name] = title

    def rows(self, title: str) -> List[List[Any]]:
        return self.sheets[title]["rows"]

    def fail_next(self, status: int = 403, message: str = "The caller does not have permission",
                  method: Optional[str] = None) -> None:
        self.failures.append({"status": status, "message": message, "method": method})

    def respond_next(self, response: FakeResponse) -> None:
        self.raw_responses.append(response)

    def calls_to(self, method: str) -> List[Dict[str, Any]]:
        return [c for c in self.calls if c["method"] == method]

    # -- requests.Session interface --------------------------------------

    def request(self, method, url, headers=None, params=None, json=None, timeout=None):
        with self._lock:
            self.calls.append({
                "method": method, "url": url, "headers": dict(headers or {}),
                "params": dict(params or {}), "json": copy.deepcopy(json), "timeout": timeout,
            })
            if self.raw_responses:
                return self.raw_responses.pop(0)
            for failure in self.failures:
                if failure["method"] in (None, method):
                    self.failures.remove(failure)
                    return self._error(failure["status"], failure["message"])
            return self._dispatch(method, url, params or {}, json)

    # -- endpoint emulation ----------------------------------------------

    @staticmethod
    def _error(status: int, message: str) -> FakeResponse:
        return FakeResponse(status, {"error": {"code": status, "message": message, "status": "ERROR"}})

    def _dispatch(self, method, url, params, body) -> FakeResponse:
        if not url.startswith(self.base):
            return self._error(404, "Requested entity was not found.")
        path = url[len(self.base):]

        if path == "" and method == "GET":
            return self._metadata(params)
        if path == ":batchUpdate" and method == "POST":
            return self._batch_update(body)
        if path.startswith("/values/"):
            ref = unquote(path[len("/values/"):])
            if method == "POST" and ref.endswith(":append"):
                return self._append(ref[:-len(":append")], params, body)
            if method == "GET":
                return self._read(ref)
            if method == "PUT":
                return self._write(ref, params, body)
        return self._error(404, f"Unsupported request {method} {path}")

    def _resolve(self, ref: str):
        if ref in self.named_ranges:
            return self.named_ranges[ref], None
        match = A1_RANGE.match(ref)
        if match:
            title = (match.group(1) or "").replace("''", "'") or match.group(2)
            if title in self.sheets:
                return title, match
        return None, None

    def _metadata(self, params) -> FakeResponse:
        if params.get("fields") != "sheets.properties":
            return self._error(400, "fields must be sheets.properties")
        sheets = [
            {"properties": {"sheetId": s["sheetId"], "title": title, "index": i}}
            for i, (title, s) in enumerate(self.sheets.items())
        ]
        return FakeResponse(200, {"sheets": sheets})

    def _read(self, ref) -> FakeResponse:
        title, _ = self._resolve(ref)
        if title is None:
            return self._error(400, f"Unable to parse range: {ref}")
        rows = self.rows(title)
        body: Dict[str, Any] = {"range": ref, "majorDimension": "ROWS"}
        if rows:
            body["values"] = copy.deepcopy(rows)
        return FakeResponse(200, body)

    def _append(self, ref, params, body) -> FakeResponse:
        if params.get("valueInputOption") != "USER_ENTERED":
            return self._error(400, "valueInputOption is required")
        title, _ = self._resolve(ref)
        if title is None:
            return self._error(400, f"Unable to parse range: {ref}")
        for row in body["values"]:
            self.rows(title).append(list(row))
        return FakeResponse(200, {"updates": {"updatedRange": ref, "updatedRows": len(body["values"])}})

    def _write(self, ref, params, body) -> FakeResponse:
        if params.get("valueInputOption") != "USER_ENTERED":
            return self._error(400, "valueInputOption is required")
        title, match = self._resolve(ref)
        if title is None:
            return self._error(400, f"Unable to parse range: {ref}")
        rows = self.rows(title)
        row_number, start = (int(match.group(4)), _col(match.group(3))) if match else (1, 1)
        while len(rows) < row_number:
            rows.append([])
        target = rows[row_number - 1]
        for offset, value in enumerate(body["values"][0]):
            position = start - 1 + offset
            while len(target) <= position:
                target.append("")
            target[position] = value
        return FakeResponse(200, {"updatedRange": ref, "updatedRows": 1})

    def _batch_update(self, body) -> FakeResponse:
        for request in body["requests"]:
            grid = request["deleteDimension"]["range"]
            sheet = next((s for s in self.sheets.values() if s["sheetId"] == grid["sheetId"]), None)
            if sheet is None:
                return self._error(400, f"No grid with id: {grid['sheetId']}")
            del sheet["rows"][grid["startIndex"]:grid["endIndex"]]
        return FakeResponse(200, {"spreadsheetId": "x", "replies": [{} for _ in body["requests"]]})


CUSTOMER_ROWS = [
    ["Customer ID", "Customer Name", "Customer Contact", "Customer Email", "State", "City",
     "Customer Address", "Total Sales", "Total Receipts", "Balance Receivable"],
    ["C10001", "Acme", "555-0100", "acme@example.com", "Texas", "Austin", "1 Main St", "1000", "1000", "0"],
    ["C10002", "Globex", "555-0101", "globex@example.com", "Ohio", "Dayton", "2 Elm St", "500", "200", "300"],
]

SUPPLIER_ROWS = [
    ["Supplier ID", "Supplier Name", "Supplier Contact", "Supplier Email", "State", "City",
     "Supplier Address", "Total Purchases", "Total Payments", "Balance Payable"],
    ["S20001", "Initech", "555-0200", "ap@initech.example", "Texas", "Houston", "9 Oak Rd", "800", "300", "500"],
    ["S20002", "Umbrella", "555-0201", "ap@umbrella.example", "Utah", "Provo", "3 Pine Rd", "0", "0", "0"],
]

USER_ROWS = [
    ["UserID", "Name", "Email", "Role", "Status", "Date Added"],
    ["U1001", "Ana", "ana@example.com", "Admin", "Active", "2024-01-05"],
    ["U1002", "Ben", "ben@example.com", "Staff", "Active", "2024-02-10"],
]

PAYMENT_ROWS = [
    ["Trx Date", "Trx ID", "Supplier ID", "Supplier Name", "State", "City",
     "PO ID", "Bill Num", "PMT Mode", "Amount Paid"],
    ["2024-03-01", "PT60001", "S20001", "Initech", "Texas", "Houston", "PO-1", "B-77", "Cash", "300"],
]

RECEIPT_ROWS = [
    ["Trx Date", "Trx ID", "Customer ID", "Customer Name", "State", "City",
     "SO ID", "Invoice Num", "PMT Mode", "Amount Received"],
    ["2024-03-02", "RT20001", "C10002", "Globex", "Ohio", "Dayton", "SO-1", "INV-9", "Card", "200"],
]

PO_ROWS = [
    ["PO ID", "Supplier ID", "Bill Num", "PO Total", "PO Balance"],
    ["PO-1", "S20001", "B-77", "800", "500"],
    ["PO-2", "S20002", "B-78", "100", "0"],
]

SO_ROWS = [
    ["SO ID", "Customer ID", "Invoice Num", "SO Total", "SO Balance"],
    ["SO-1", "C10002", "INV-9", "500", "300"],
]

SALES_ROWS = [
    ["SO ID", "SO Date", "Customer Name", "City", "Item Category", "Total Sales Price"],
    ["SO-1", "2024-01-15", "Globex", "Dayton", "Widgets", "500"],
    ["SO-2", "2024-01-20", "Acme", "Austin", "Gadgets", "$1,000.00"],
    ["SO-3", "2024-02-03", "Acme", "Austin", "Widgets", "250"],
    ["SO-4", "not a date", "", "", "", "50"],
]

PURCHASE_ROWS = [
    ["PO ID", "Date", "Supplier Name", "State", "Item Category", "Total Purchase Price"],
    ["PO-1", "2023-06-01", "Initech", "Texas", "Widgets", "800"],
    ["PO-2", "2024-02-01", "Umbrella", "Utah", "Gadgets", "100"],
    ["PO-3", "2024-03-01", "Initech", "Texas", "Widgets", "200"],
]

SETTINGS_ROWS = [["Acme Holdings", "1 Main St", "555-0000", "https://example.com/logo.png"]]


@pytest.fixture()
def backend() -> FakeSheetsBackend:
    fake = FakeSheetsBackend()
    fake.add_sheet("Customers", CUSTOMER_ROWS, "RANGECUSTOMERS", sheet_id=0)
    fake.add_sheet("Suppliers", SUPPLIER_ROWS, "RANGESUPPLIERS", sheet_id=11)
    fake.add_sheet("Users", USER_ROWS, "RANGEUSERS", sheet_id=22)
    fake.add_sheet("Payments", PAYMENT_ROWS, "RANGEPAYMENTS", sheet_id=33)
    fake.add_sheet("Receipts", RECEIPT_ROWS, "RANGERECEIPTS", sheet_id=44)
    fake.add_sheet("PurchaseOrders", PO_ROWS, "RANGEPO")
    fake.add_sheet("SalesOrders", SO_ROWS, "RANGESO")
    fake.add_sheet("SalesData", SALES_ROWS, "RANGESD")
    fake.add_sheet("PurchaseData", PURCHASE_ROWS, "RANGEPD")
    fake.add_sheet("Settings", SETTINGS_ROWS, "RANGECOMPANYSETTINGS")
    return fake


@pytest.fixture()
def client(backend: FakeSheetsBackend) -> SheetsClient:
    return SheetsClient(SPREADSHEET_ID, token_provider=lambda: TOKEN, session=backend)


@pytest.fixture()
def config() -> ConfigManager:
    return ConfigManager(ROOT / "config.json")


@pytest.fixture()
def services(client: SheetsClient, config: ConfigManager):
    from bizsheets.app import Services

    return Services(client, config)
