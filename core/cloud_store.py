"""Per-user cloud documents stored as rows of a Google Sheets worksheet.

Row layout: ``user_id | ratings_map | library | last_synced_at``. JSON columns
are written RAW so Sheets never reinterprets them.
"""

from __future__ import annotations

import json
import logging
import threading
from typing import Any, Callable, Dict, Mapping, Optional, Protocol

import gspread
from gspread.utils import rowcol_to_a1

from core.config import CLOUD_WORKSHEET_NAME, GOOGLE_CREDENTIALS, GOOGLE_SHEET_NAME
from core.ratings_cache import now_ms
from core.ratings_models import RatingRecord, RatingsMap, ratings_map_from_json, ratings_map_to_json

logger = logging.getLogger(__name__)

HEADER = ["user_id", "ratings_map", "library", "last_synced_at"]
_RATINGS_COLUMN = 2
_LIBRARY_COLUMN = 3
_SYNCED_AT_COLUMN = 4
# Google Sheets refuses cells longer than this.
CELL_CHAR_LIMIT = 50_000


class CloudStoreError(RuntimeError):
    pass


class CloudDocumentStore(Protocol):
    def fetch(self, user_id: str) -> Optional[RatingsMap]:
        ...

    def write(self, user_id: str, ratings: Mapping[str, RatingRecord]) -> None:
        ...

    def fetch_library(self, user_id: str) -> Optional[Dict[str, Any]]:
        ...

    def write_library(self, user_id: str, payload: Mapping[str, Any]) -> None:
        ...


def connect_to_worksheet(
    sheet_name: Optional[str] = None,
    credentials: Optional[str] = None,
    worksheet_name: Optional[str] = None,
):
    sheet_name = sheet_name or GOOGLE_SHEET_NAME
    credentials = credentials or GOOGLE_CREDENTIALS
    worksheet_name = worksheet_name or CLOUD_WORKSHEET_NAME
    if not sheet_name or not credentials:
        raise CloudStoreError("GOOGLE_SHEET_NAME and GOOGLE_CREDENTIALS must be set for cloud sync")
    gc = gspread.service_account(filename=credentials)
    sh = gc.open(sheet_name)
    try:
        return sh.worksheet(worksheet_name)
    except gspread.WorksheetNotFound:
        logger.info("Creating cloud worksheet %r", worksheet_name)
        worksheet = sh.add_worksheet(title=worksheet_name, rows=100, cols=len(HEADER))
        worksheet.append_row(HEADER, value_input_option="RAW")
        return worksheet


def _dumps(payload: Any) -> str:
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))


def fit_ratings_payload(ratings: Mapping[str, RatingRecord], limit: int = CELL_CHAR_LIMIT) -> str:
    """Serialize ``ratings``, dropping the oldest records until the text fits in one cell."""
    encoded = ratings_map_to_json(ratings)
    text = _dumps(encoded)
    if len(text) <= limit:
        return text
    newest_first = sorted(ratings.items(), key=lambda item: item[1].fetched_at, reverse=True)
    keep = len(newest_first)
    while keep > 0 and len(text) > limit:
        keep = int(keep * 0.9)
        text = _dumps({key: record.to_dict() for key, record in newest_first[:keep]})
    logger.warning(
        "Cloud ratings map trimmed to %s of %s records to fit a sheet cell",
        keep,
        len(newest_first),
    )
    return text


class SheetDocumentStore:
    def __init__(
        self,
        worksheet_factory: Callable[[], Any] = connect_to_worksheet,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._worksheet_factory = worksheet_factory
        self._clock = clock
        self._worksheet = None
        self._lock = threading.RLock()

    def _worksheet_unlocked(self):
        if self._worksheet is None:
            self._worksheet = self._worksheet_factory()
        return self._worksheet

    def _find_row_unlocked(self, user_id: str) -> Optional[int]:
        cell = self._worksheet_unlocked().find(str(user_id), in_column=1)
        return cell.row if cell is not None else None

    def _read_json_cell_unlocked(self, user_id: str, column: int) -> Any:
        row = self._find_row_unlocked(user_id)
        if row is None:
            return None
        values = self._worksheet_unlocked().row_values(row)
        if len(values) < column or not values[column - 1].strip():
            return None
        try:
            return json.loads(values[column - 1])
        except ValueError as exc:
            raise CloudStoreError(f"Cloud document for {user_id} is not valid JSON") from exc

    def _write_cell_unlocked(self, user_id: str, column: int, text: str) -> None:
        worksheet = self._worksheet_unlocked()
        synced_at = str(self._clock())
        row = self._find_row_unlocked(user_id)
        if row is None:
            values = [str(user_id), "", "", synced_at]
            values[column - 1] = text
            worksheet.append_row(values, value_input_option="RAW")
            return
        worksheet.update(
            values=[[text]],
            range_name=rowcol_to_a1(row, column),
            value_input_option="RAW",
        )
        worksheet.update(
            values=[[synced_at]],
            range_name=rowcol_to_a1(row, _SYNCED_AT_COLUMN),
            value_input_option="RAW",
        )

    def fetch(self, user_id: str) -> Optional[RatingsMap]:
        with self._lock:
            raw = self._read_json_cell_unlocked(user_id, _RATINGS_COLUMN)
        if raw is None:
            return None
        return ratings_map_from_json(raw)

    def write(self, user_id: str, ratings: Mapping[str, RatingRecord]) -> None:
        if not user_id:
            raise CloudStoreError("No user id")
        text = fit_ratings_payload(ratings)
        with self._lock:
            self._write_cell_unlocked(user_id, _RATINGS_COLUMN, text)

    def fetch_library(self, user_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            raw = self._read_json_cell_unlocked(user_id, _LIBRARY_COLUMN)
        return raw if isinstance(raw, dict) else None

    def write_library(self, user_id: str, payload: Mapping[str, Any]) -> None:
        if not user_id:
            raise CloudStoreError("No user id")
        text = _dumps(dict(payload))
        if len(text) > CELL_CHAR_LIMIT:
            raise CloudStoreError("Library is too large for a single sheet cell")
        with self._lock:
            self._write_cell_unlocked(user_id, _LIBRARY_COLUMN, text)


__all__ = [
    "CELL_CHAR_LIMIT",
    "HEADER",
    "CloudDocumentStore",
    "CloudStoreError",
    "SheetDocumentStore",
    "connect_to_worksheet",
    "fit_ratings_payload",
]
