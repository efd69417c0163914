"""Unit tests for the Google Sheets backed cloud document store."""

from __future__ import annotations

import json
import unittest
from types import SimpleNamespace
from typing import Any, List

from core.cloud_store import CloudStoreError, SheetDocumentStore, fit_ratings_payload
from core.ratings_models import RatingRecord


def _col_index(range_name: str) -> int:
    letters = "".join(ch for ch in range_name if ch.isalpha())
    index = 0
    for ch in letters:
        index = index * 26 + (ord(ch.upper()) - ord("A") + 1)
    return index


def _row_index(range_name: str) -> int:
    return int("".join(ch for ch in range_name if ch.isdigit()))


class _FakeWorksheet:
    def __init__(self, rows: List[List[str]] | None = None) -> None:
        self.rows = rows or [["user_id", "ratings_map", "library", "last_synced_at"]]
        self.appended: List[List[str]] = []
        self.updates: List[str] = []

    def find(self, query, in_column=None):
        for index, row in enumerate(self.rows, start=1):
            if row and row[0] == query:
                return SimpleNamespace(row=index, col=1)
        return None

    def row_values(self, row: int) -> List[str]:
        return list(self.rows[row - 1])

    def append_row(self, values, value_input_option=None) -> None:
        self.appended.append(list(values))
        self.rows.append(list(values))

    def update(self, values=None, range_name=None, value_input_option=None) -> None:
        self.updates.append(range_name)
        row = self.rows[_row_index(range_name) - 1]
        col = _col_index(range_name)
        while len(row) < col:
            row.append("")
        row[col - 1] = values[0][0]


def _store(worksheet: _FakeWorksheet) -> SheetDocumentStore:
    return SheetDocumentStore(worksheet_factory=lambda: worksheet, clock=lambda: 42)


class SheetDocumentStoreTests(unittest.TestCase):
    def test_fetch_unknown_user_returns_none(self) -> None:
        self.assertIsNone(_store(_FakeWorksheet()).fetch("local"))

    def test_first_write_appends_row(self) -> None:
        worksheet = _FakeWorksheet()
        store = _store(worksheet)
        store.write("local", {"movie:1": RatingRecord(fetched_at=5, primary_rating="7.1")})

        self.assertEqual(len(worksheet.appended), 1)
        row = worksheet.appended[0]
        self.assertEqual(row[0], "local")
        self.assertEqual(json.loads(row[1])["movie:1"]["imdbRating"], "7.1")
        self.assertEqual(row[3], "42")

    def test_second_write_updates_cells_in_place(self) -> None:
        worksheet = _FakeWorksheet()
        store = _store(worksheet)
        store.write("local", {"movie:1": RatingRecord(fetched_at=5)})
        store.write("local", {"movie:2": RatingRecord(fetched_at=6, primary_rating="6.6")})

        self.assertEqual(len(worksheet.rows), 2)
        self.assertEqual(worksheet.updates, ["B2", "D2"])
        fetched = store.fetch("local")
        self.assertEqual(list(fetched), ["movie:2"])
        self.assertEqual(fetched["movie:2"].primary_rating, "6.6")

    def test_library_is_kept_beside_ratings(self) -> None:
        worksheet = _FakeWorksheet()
        store = _store(worksheet)
        store.write("local", {"movie:1": RatingRecord(fetched_at=5)})
        store.write_library("local", {"favorites": [], "watchlist": [], "userRatings": {"movie:1": 8}})

        self.assertEqual(store.fetch_library("local")["userRatings"], {"movie:1": 8})
        self.assertIn("movie:1", store.fetch("local"))

    def test_invalid_json_cell_raises(self) -> None:
        worksheet = _FakeWorksheet(
            [["user_id", "ratings_map", "library", "last_synced_at"], ["local", "{oops", "", "1"]]
        )
        with self.assertRaises(CloudStoreError):
            _store(worksheet).fetch("local")

    def test_write_requires_user_id(self) -> None:
        with self.assertRaises(CloudStoreError):
            _store(_FakeWorksheet()).write("", {})


class FitRatingsPayloadTests(unittest.TestCase):
    def test_small_map_is_kept_whole(self) -> None:
        ratings = {"movie:1": RatingRecord(fetched_at=1)}
        self.assertEqual(json.loads(fit_ratings_payload(ratings)), {"movie:1": ratings["movie:1"].to_dict()})

    def test_oversized_map_keeps_newest_records(self) -> None:
        ratings: dict[str, Any] = {
            f"movie:{i}": RatingRecord(fetched_at=i, primary_rating="7.0", external_id=f"tt{i:07d}")
            for i in range(200)
        }
        text = fit_ratings_payload(ratings, limit=2_000)
        self.assertLessEqual(len(text), 2_000)
        kept = json.loads(text)
        self.assertIn("movie:199", kept)
        self.assertNotIn("movie:0", kept)


if __name__ == "__main__":
    unittest.main()
