from typing import Any, Dict, List, Optional

from bizsheets.utils import format_sheet_date

from .base import RecordService, RecordValidationError


class UserService(RecordService):
    """Application users. Ids are always generated; Date Added is set once."""

    headers = ['UserID', 'Name', 'Email', 'Role', 'Status', 'Date Added']
    required_fields = ['Name', 'Email', 'Role']
    label = "user"

    ROLES = ('Admin', 'Manager', 'Staff')
    STATUSES = ('Active', 'Inactive')

    def prepare_new(self, data: Dict[str, Any], token: Optional[str] = None) -> Dict[str, Any]:
        data = dict(data)
        data.pop(self.id_field, None)
        data.setdefault('Role', 'Staff')
        data.setdefault('Status', 'Active')
        data = super().prepare_new(data, token=token)
        data['Date Added'] = format_sheet_date()
        return data

    def validate(self, data: Dict[str, Any]) -> None:
        super().validate(data)
        if data.get('Role') not in self.ROLES:
            raise RecordValidationError(f"Role must be one of {', '.join(self.ROLES)}")
        if data.get('Status') not in self.STATUSES:
            raise RecordValidationError(f"Status must be one of {', '.join(self.STATUSES)}")

    def update_values(self, existing, data: Dict[str, Any]) -> List[Any]:
        # Keep the original Date Added
        data = {k: v for k, v in data.items() if k != 'Date Added'}
        return super().update_values(existing, data)
