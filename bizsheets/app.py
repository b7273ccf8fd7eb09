"""
BizSheets API - FastAPI Application

JSON endpoints over a Google spreadsheet used as the only data store:
- Customers and suppliers
- Supplier payments and customer receipts
- Users
- Company settings
- Dashboard KPIs

Callers may pass their own Google access token as ``Authorization: Bearer``;
otherwise the server-side token provider is used.
"""

# ============================================================================
# IMPORTS
# ============================================================================

import logging
from typing import Optional

from fastapi import FastAPI, Header

from bizsheets.config_manager import ConfigManager, EnvConfig, get_config_manager
from bizsheets.queries.dashboard import DashboardQuery
from bizsheets.schemas import (
    CompanySettings,
    CustomerIn,
    PaymentIn,
    ReceiptIn,
    RecordListResponse,
    RecordResponse,
    SupplierIn,
    UserIn,
)
from bizsheets.services.records import (
    CompanySettingsService,
    CustomerService,
    PaymentService,
    ReceiptService,
    SupplierService,
    UserService,
    search_records,
)
from bizsheets.services.sheets import (
    ServiceAccountTokenProvider,
    SheetsClient,
    StaticTokenProvider,
)
from bizsheets.utils import handle_errors

# ============================================================================
# CONFIGURATION
# ============================================================================

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="BizSheets API",
    description="Customers, suppliers, payments, receipts, users and dashboard backed by Google Sheets",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)


class Services:
    """All record services wired to one SheetsClient."""

    def __init__(self, client: SheetsClient, config: ConfigManager):
        scheme = config.id_scheme
        self.client = client
        self.customers = CustomerService(client, config.get_range("customers"), scheme)
        self.suppliers = SupplierService(client, config.get_range("suppliers"), scheme)
        self.users = UserService(client, config.get_range("users"), scheme)
        self.payments = PaymentService(
            client, config.get_range("payments"), config.get_range("suppliers"), scheme
        )
        self.receipts = ReceiptService(
            client, config.get_range("receipts"), config.get_range("customers"), scheme
        )
        self.settings = CompanySettingsService(
            client, config.get_global_setting("settings_range", "RANGECOMPANYSETTINGS")
        )
        self.dashboard = DashboardQuery(
            client,
            sales_range=config.get_global_setting("sales_range", "RANGESD"),
            purchases_range=config.get_global_setting("purchases_range", "RANGEPD"),
            customers_range=self.customers.config.range,
            suppliers_range=self.suppliers.config.range,
            top_customers=config.get_global_setting("top_customers", 10),
        )


_services: Optional[Services] = None


def build_services(config: Optional[ConfigManager] = None) -> Services:
    """Create the client and services from config.json and the environment."""
    config = config or get_config_manager()
    if EnvConfig.get_access_token() or not EnvConfig.has_service_account():
        token_provider = StaticTokenProvider()
    else:
        token_provider = ServiceAccountTokenProvider()
    client = SheetsClient(
        EnvConfig.get_spreadsheet_id(),
        token_provider=token_provider,
        request_timeout=config.request_timeout,
        cache_sheet_ids=config.cache_sheet_ids,
    )
    return Services(client, config)


def get_services() -> Services:
    """Get or create the process-wide services."""
    global _services
    if _services is None:
        _services = build_services()
    return _services


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token of an ``Authorization: Bearer`` header, if any."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


# ============================================================================
# ROOT ENDPOINT
# ============================================================================

@app.get("/", tags=["General"], summary="API Information")
def read_root():
    """Basic information about the API and its endpoints."""
    return {
        "name": "BizSheets API",
        "version": app.version,
        "endpoints": [
            "/customers", "/suppliers", "/users", "/payments", "/receipts",
            "/settings", "/dashboard", "/cache/invalidate",
        ],
    }


@app.post("/cache/invalidate", tags=["General"], summary="Forget cached sheet ids")
@handle_errors
def invalidate_cache():
    """Call after sheets were renamed, added or removed."""
    get_services().client.invalidate_sheet_ids()
    return {"message": "Sheet id cache cleared"}


# ============================================================================
# CUSTOMERS
# ============================================================================

@app.get("/customers", tags=["Customers"], response_model=RecordListResponse)
@handle_errors
def list_customers(search: str = "", column: str = "All", authorization: Optional[str] = Header(None)):
    records = search_records(get_services().customers.list(token=bearer_token(authorization)), search, column)
    return {"records": records, "total": len(records)}


@app.post("/customers", tags=["Customers"], response_model=RecordResponse)
@handle_errors
def create_customer(body: CustomerIn, authorization: Optional[str] = Header(None)):
    record = get_services().customers.create(body.to_sheet(), token=bearer_token(authorization))
    return {"record": record, "message": "Customer saved"}


@app.put("/customers/{customer_id}", tags=["Customers"], response_model=RecordResponse)
@handle_errors
def update_customer(customer_id: str, body: CustomerIn, authorization: Optional[str] = Header(None)):
    record = get_services().customers.update(customer_id, body.to_sheet(), token=bearer_token(authorization))
    return {"record": record, "message": "Customer updated"}


@app.delete("/customers/{customer_id}", tags=["Customers"], response_model=RecordResponse)
@handle_errors
def delete_customer(customer_id: str, authorization: Optional[str] = Header(None)):
    record = get_services().customers.delete(customer_id, token=bearer_token(authorization))
    return {"record": record, "message": "Customer deleted"}


# ============================================================================
# SUPPLIERS
# ============================================================================

@app.get("/suppliers", tags=["Suppliers"], response_model=RecordListResponse)
@handle_errors
def list_suppliers(search: str = "", column: str = "All", authorization: Optional[str] = Header(None)):
    records = search_records(get_services().suppliers.list(token=bearer_token(authorization)), search, column)
    return {"records": records, "total": len(records)}


@app.post("/suppliers", tags=["Suppliers"], response_model=RecordResponse)
@handle_errors
def create_supplier(body: SupplierIn, authorization: Optional[str] = Header(None)):
    record = get_services().suppliers.create(body.to_sheet(), token=bearer_token(authorization))
    return {"record": record, "message": "Supplier saved"}


@app.put("/suppliers/{supplier_id}", tags=["Suppliers"], response_model=RecordResponse)
@handle_errors
def update_supplier(supplier_id: str, body: SupplierIn, authorization: Optional[str] = Header(None)):
    record = get_services().suppliers.update(supplier_id, body.to_sheet(), token=bearer_token(authorization))
    return {"record": record, "message": "Supplier updated"}


@app.delete("/suppliers/{supplier_id}", tags=["Suppliers"], response_model=RecordResponse)
@handle_errors
def delete_supplier(supplier_id: str, authorization: Optional[str] = Header(None)):
    record = get_services().suppliers.delete(supplier_id, token=bearer_token(authorization))
    return {"record": record, "message": "Supplier deleted"}


# ============================================================================
# USERS
# ============================================================================

@app.get("/users", tags=["Users"], response_model=RecordListResponse)
@handle_errors
def list_users(search: str = "", column: str = "All", authorization: Optional[str] = Header(None)):
    records = search_records(get_services().users.list(token=bearer_token(authorization)), search, column)
    return {"records": records, "total": len(records)}


@app.post("/users", tags=["Users"], response_model=RecordResponse)
@handle_errors
def create_user(body: UserIn, authorization: Optional[str] = Header(None)):
    record = get_services().users.create(body.to_sheet(), token=bearer_token(authorization))
    return {"record": record, "message": "User added"}


@app.put("/users/{user_id}", tags=["Users"], response_model=RecordResponse)
@handle_errors
def update_user(user_id: str, body: UserIn, authorization: Optional[str] = Header(None)):
    record = get_services().users.update(user_id, body.to_sheet(), token=bearer_token(authorization))
    return {"record": record, "message": "User updated"}


@app.delete("/users/{user_id}", tags=["Users"], response_model=RecordResponse)
@handle_errors
def delete_user(user_id: str, authorization: Optional[str] = Header(None)):
    record = get_services().users.delete(user_id, token=bearer_token(authorization))
    return {"record": record, "message": "User deleted"}


# ============================================================================
# PAYMENTS & RECEIPTS
# ============================================================================

@app.get("/payments", tags=["Payments"], response_model=RecordListResponse)
@handle_errors
def list_payments(search: str = "", column: str = "All", authorization: Optional[str] = Header(None)):
    records = search_records(get_services().payments.list(token=bearer_token(authorization)), search, column)
    return {"records": records, "total": len(records)}


@app.get("/payments/orders", tags=["Payments"], response_model=RecordListResponse)
@handle_errors
def list_purchase_orders(authorization: Optional[str] = Header(None)):
    records = get_services().payments.list_orders(token=bearer_token(authorization))
    return {"records": records, "total": len(records)}


@app.post("/payments", tags=["Payments"], response_model=RecordResponse)
@handle_errors
def create_payment(body: PaymentIn, authorization: Optional[str] = Header(None)):
    record = get_services().payments.create(body.to_sheet(), token=bearer_token(authorization))
    return {"record": record, "message": "Payment saved; related balances will be recalculated"}


@app.delete("/payments/{trx_id}", tags=["Payments"], response_model=RecordResponse)
@handle_errors
def delete_payment(trx_id: str, authorization: Optional[str] = Header(None)):
    record = get_services().payments.delete(trx_id, token=bearer_token(authorization))
    return {"record": record, "message": "Payment deleted; related balances will be recalculated"}


@app.get("/receipts", tags=["Receipts"], response_model=RecordListResponse)
@handle_errors
def list_receipts(search: str = "", column: str = "All", authorization: Optional[str] = Header(None)):
    records = search_records(get_services().receipts.list(token=bearer_token(authorization)), search, column)
    return {"records": records, "total": len(records)}


@app.get("/receipts/orders", tags=["Receipts"], response_model=RecordListResponse)
@handle_errors
def list_sales_orders(authorization: Optional[str] = Header(None)):
    records = get_services().receipts.list_orders(token=bearer_token(authorization))
    return {"records": records, "total": len(records)}


@app.post("/receipts", tags=["Receipts"], response_model=RecordResponse)
@handle_errors
def create_receipt(body: ReceiptIn, authorization: Optional[str] = Header(None)):
    record = get_services().receipts.create(body.to_sheet(), token=bearer_token(authorization))
    return {"record": record, "message": "Receipt saved; related balances will be recalculated"}


@app.delete("/receipts/{trx_id}", tags=["Receipts"], response_model=RecordResponse)
@handle_errors
def delete_receipt(trx_id: str, authorization: Optional[str] = Header(None)):
    record = get_services().receipts.delete(trx_id, token=bearer_token(authorization))
    return {"record": record, "message": "Receipt deleted; related balances will be recalculated"}


# ============================================================================
# SETTINGS & DASHBOARD
# ============================================================================

@app.get("/settings", tags=["Settings"], response_model=CompanySettings)
@handle_errors
def get_settings(authorization: Optional[str] = Header(None)):
    return get_services().settings.get(token=bearer_token(authorization))


@app.put("/settings", tags=["Settings"], response_model=CompanySettings)
@handle_errors
def update_settings(body: CompanySettings, authorization: Optional[str] = Header(None)):
    return get_services().settings.update(body.model_dump(), token=bearer_token(authorization))


@app.get("/dashboard", tags=["Dashboard"])
@handle_errors
def get_dashboard(authorization: Optional[str] = Header(None)):
    """KPIs and chart series; fails as a whole if any of its ranges fails."""
    return get_services().dashboard.run(token=bearer_token(authorization))
