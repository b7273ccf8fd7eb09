"""
Company settings.

The settings range holds a single data row with no header row:
company name, address, contact and logo URL, in that order.
"""
import logging
from typing import Dict, Optional

from bizsheets.services.sheets import SheetsClient

logger = logging.getLogger(__name__)

SETTINGS_FIELDS = ['companyName', 'companyAddress', 'companyContact', 'companyLogoUrl']


class CompanySettingsService:
    """Read and overwrite the company settings row."""

    def __init__(self, client: SheetsClient, range_ref: str = "RANGECOMPANYSETTINGS"):
        self.client = client
        self.range_ref = range_ref

    def get(self, token: Optional[str] = None) -> Dict[str, str]:
        values = self.client.get_values(self.range_ref, token=token)
        if not values:
            return {field: '' for field in SETTINGS_FIELDS}
        row = values[0]
        return {
            field: (row[i] if i < len(row) and row[i] is not None else '')
            for i, field in enumerate(SETTINGS_FIELDS)
        }

    def update(self, settings: Dict[str, Optional[str]], token: Optional[str] = None) -> Dict[str, str]:
        values = [settings.get(field) or '' for field in SETTINGS_FIELDS]
        self.client.update_row(self.range_ref, values, token=token)
        logger.info("Updated company settings")
        return dict(zip(SETTINGS_FIELDS, values))
