"""
Pydantic schemas for request/response models.

Request models use the spreadsheet's column headers as aliases, so a
validated body dumps straight into the header-keyed dict the record
services expect.
"""

from datetime import date
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class SheetRecordIn(BaseModel):
    """Base for request bodies that map onto sheet columns."""
    model_config = ConfigDict(populate_by_name=True)

    def to_sheet(self) -> Dict[str, Any]:
        """Header-keyed values the client actually sent."""
        return self.model_dump(by_alias=True, exclude_unset=True)


# ============================================================================
# PARTY SCHEMAS
# ============================================================================

class CustomerIn(SheetRecordIn):
    """Customer create/update body."""
    customer_id: Optional[str] = Field(None, alias="Customer ID", examples=["C12345"])
    customer_name: Optional[str] = Field(None, alias="Customer Name", examples=["Acme Traders"])
    customer_contact: Optional[str] = Field(None, alias="Customer Contact", examples=["+1 555 0100"])
    customer_email: Optional[str] = Field(None, alias="Customer Email", examples=["buyer@acme.test"])
    state: Optional[str] = Field(None, alias="State", examples=["Texas"])
    city: Optional[str] = Field(None, alias="City", examples=["Austin"])
    customer_address: Optional[str] = Field(None, alias="Customer Address")


class SupplierIn(SheetRecordIn):
    """Supplier create/update body."""
    supplier_id: Optional[str] = Field(None, alias="Supplier ID", examples=["S54321"])
    supplier_name: Optional[str] = Field(None, alias="Supplier Name", examples=["Globex Supply"])
    supplier_contact: Optional[str] = Field(None, alias="Supplier Contact")
    supplier_email: Optional[str] = Field(None, alias="Supplier Email")
    state: Optional[str] = Field(None, alias="State")
    city: Optional[str] = Field(None, alias="City")
    supplier_address: Optional[str] = Field(None, alias="Supplier Address")


# ============================================================================
# USER SCHEMAS
# ============================================================================

class UserIn(SheetRecordIn):
    """User create/update body. UserID and Date Added are assigned on create."""
    name: Optional[str] = Field(None, alias="Name", examples=["Jane Doe"])
    email: Optional[str] = Field(None, alias="Email", examples=["jane@example.com"])
    role: Optional[str] = Field(None, alias="Role", examples=["Staff"])
    status: Optional[str] = Field(None, alias="Status", examples=["Active"])


# ============================================================================
# TRANSACTION SCHEMAS
# ============================================================================

class PaymentIn(SheetRecordIn):
    """Supplier payment against a purchase order."""
    trx_date: Optional[Union[date, str]] = Field(None, alias="Trx Date", examples=["2025-01-31"])
    trx_id: Optional[str] = Field(None, alias="Trx ID", examples=["PT60001"])
    supplier_id: Optional[str] = Field(None, alias="Supplier ID")
    po_id: str = Field(..., alias="PO ID", examples=["PO-1001"])
    pmt_mode: Optional[str] = Field(None, alias="PMT Mode", examples=["Bank Transfer"])
    amount_paid: float = Field(..., alias="Amount Paid", examples=[250.0])


class ReceiptIn(SheetRecordIn):
    """Customer receipt against a sales order."""
    trx_date: Optional[Union[date, str]] = Field(None, alias="Trx Date", examples=["2025-01-31"])
    trx_id: Optional[str] = Field(None, alias="Trx ID", examples=["RT20001"])
    customer_id: Optional[str] = Field(None, alias="Customer ID")
    so_id: str = Field(..., alias="SO ID", examples=["SO-2001"])
    pmt_mode: Optional[str] = Field(None, alias="PMT Mode", examples=["Cash"])
    amount_received: float = Field(..., alias="Amount Received", examples=[120.0])


# ============================================================================
# SETTINGS SCHEMAS
# ============================================================================

class CompanySettings(BaseModel):
    """Company details shown on documents."""
    companyName: str = Field("", description="Company name", examples=["Acme Traders"])
    companyAddress: str = Field("", description="Postal address")
    companyContact: str = Field("", description="Phone or email")
    companyLogoUrl: str = Field("", description="Logo image URL")


# ============================================================================
# RESPONSE SCHEMAS
# ============================================================================

class RecordListResponse(BaseModel):
    """Response model for listing records."""
    records: List[Dict[str, Any]] = Field(..., description="Header-keyed records in sheet order")
    total: int = Field(..., description="Number of records returned", examples=[42])


class RecordResponse(BaseModel):
    """Response model for a single created/updated/deleted record."""
    record: Dict[str, Any] = Field(..., description="Header-keyed record")
    message: str = Field(..., description="Status message", examples=["Customer saved"])
