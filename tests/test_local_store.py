"""Unit tests for the durable local store and ratings persistence."""

from __future__ import annotations

import shutil
import unittest
import uuid
from pathlib import Path
from unittest.mock import patch

from core.local_store import RATINGS_STORAGE_KEY, JsonFileStore, RatingsPersistence
from core.ratings_models import RatingRecord


class LocalStoreTests(unittest.TestCase):
    def _make_local_tmp_dir(self) -> Path:
        root = Path.cwd() / ".tmp_local_store_tests"
        root.mkdir(parents=True, exist_ok=True)
        path = root / f"run_{uuid.uuid4().hex}"
        path.mkdir(parents=True, exist_ok=True)
        self.addCleanup(shutil.rmtree, path, True)
        return path

    def test_set_get_remove_survive_reopen(self) -> None:
        path = self._make_local_tmp_dir() / "store.json"
        store = JsonFileStore(path)
        store.set("a", "1")
        store.set("b", "2")
        store.remove("a")

        reopened = JsonFileStore(path)
        self.assertIsNone(reopened.get("a"))
        self.assertEqual(reopened.get("b"), "2")
        self.assertEqual(list(path.parent.glob("*.tmp")), [])

    def test_corrupt_file_reads_as_empty(self) -> None:
        path = self._make_local_tmp_dir() / "store.json"
        path.write_text("{not json", encoding="utf-8")
        store = JsonFileStore(path)
        self.assertIsNone(store.get("a"))
        store.set("a", "1")
        self.assertEqual(JsonFileStore(path).get("a"), "1")

    def test_ratings_round_trip_on_fresh_instance(self) -> None:
        path = self._make_local_tmp_dir() / "store.json"
        ratings = {
            "movie:603": RatingRecord(
                fetched_at=100,
                external_id="tt0133093",
                primary_rating="8.7",
                vote_count="1,900,000",
                secondary_score="73",
                tertiary_score="83%",
            ),
            "movie:1": RatingRecord(fetched_at=200),
        }
        self.assertTrue(RatingsPersistence(JsonFileStore(path)).save(ratings))

        loaded = RatingsPersistence(JsonFileStore(path)).load()
        self.assertEqual(loaded, ratings)

    def test_corrupt_ratings_payload_loads_empty(self) -> None:
        path = self._make_local_tmp_dir() / "store.json"
        store = JsonFileStore(path)
        store.set(RATINGS_STORAGE_KEY, "{broken")
        self.assertEqual(RatingsPersistence(store).load(), {})

    def test_write_failure_is_swallowed(self) -> None:
        store = JsonFileStore(self._make_local_tmp_dir() / "store.json")
        persistence = RatingsPersistence(store)
        with patch.object(store, "set", side_effect=OSError("disk full")):
            self.assertFalse(persistence.save({"movie:1": RatingRecord(fetched_at=1)}))

    def test_erase_removes_ratings_only(self) -> None:
        store = JsonFileStore(self._make_local_tmp_dir() / "store.json")
        store.set("library:local", "{}")
        persistence = RatingsPersistence(store)
        persistence.save({"movie:1": RatingRecord(fetched_at=1)})
        persistence.erase()
        self.assertIsNone(store.get(RATINGS_STORAGE_KEY))
        self.assertEqual(store.get("library:local"), "{}")


if __name__ == "__main__":
    unittest.main()
