import logging
import math
import re
import traceback
from datetime import date, datetime
from functools import wraps
from typing import Any, Optional, Union

from fastapi import HTTPException
from requests.exceptions import RequestException

from bizsheets.services.sheets.errors import DecodeError, NotFoundError, RemoteError

logger = logging.getLogger(__name__)

_NON_NUMERIC = re.compile(r"[^0-9eE.+-]")


def to_number(value: Any) -> float:
    """
    Coerce a sheet cell to a float, treating blanks and junk as 0.

    Formatted cells such as ``"$1,234.50"`` or ``"(12)"`` are understood.
    """
    if value is None or value == "":
        return 0.0
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return 0.0 if math.isnan(value) else float(value)
    text = str(value).strip()
    negative = text.startswith("(") and text.endswith(")")
    cleaned = _NON_NUMERIC.sub("", text)
    try:
        number = float(cleaned)
    except ValueError:
        return 0.0
    return -number if negative else number


def format_sheet_date(value: Optional[Union[date, datetime, str]] = None) -> str:
    """
    Format a date the way it is written to the sheet (YYYY-MM-DD).

    Strings are passed through untouched; None means today.
    """
    if value is None:
        value = date.today()
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def handle_errors(func):
    """
    Decorator to map record store errors onto HTTP responses.

    Status codes:
        - 400 for rejected input (ValueError and subclasses)
        - 404 when a sheet or record cannot be found
        - 502 when Google Sheets fails or answers with an unexpected shape
        - 503 for network errors reaching Google Sheets
        - 500 for anything else

    Usage:
        >>> @app.get("/customers")
        >>> @handle_errors
        >>> def list_customers():
        >>>     ...
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)

        except HTTPException:
            raise

        except NotFoundError as e:
            logger.warning(f"Not found: {e}")
            raise HTTPException(status_code=404, detail=str(e))

        except RemoteError as e:
            logger.error(f"Google Sheets error ({e.status_code}): {e.message}")
            raise HTTPException(status_code=502, detail=str(e))

        except DecodeError as e:
            logger.error(f"Unexpected response shape: {e}")
            raise HTTPException(status_code=502, detail=f"Unexpected response from Google Sheets: {e}")

        except ValueError as e:
            logger.warning(f"Rejected request: {e}")
            raise HTTPException(status_code=400, detail=str(e))

        except RequestException as e:
            tb = traceback.format_exc()
            logger.error(f"Network error: {e}\nTraceback:\n{tb}")
            raise HTTPException(status_code=503, detail="Service unavailable: network error while connecting to Google Sheets.")

        except Exception as e:
            tb = traceback.format_exc()
            logger.error(f"Unexpected server error: {e}\nTraceback:\n{tb}")
            raise HTTPException(status_code=500, detail="An unexpected server error occurred.")
    return wrapper
