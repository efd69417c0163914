"""Unit tests for rating records and cache keys."""

from __future__ import annotations

import unittest

from core.ratings_models import (
    RatingRecord,
    RatingSubject,
    cache_key_for,
    confirmed_miss,
    normalize_subject_type,
    ratings_map_from_json,
    ratings_map_to_json,
)


class RatingsModelsTests(unittest.TestCase):
    def test_record_uses_persisted_field_names(self) -> None:
        record = RatingRecord(
            fetched_at=1700000000000,
            external_id="tt0133093",
            primary_rating="8.7",
            vote_count="1,900,000",
            secondary_score="73",
            tertiary_score="83%",
        )
        self.assertEqual(
            record.to_dict(),
            {
                "imdbId": "tt0133093",
                "imdbRating": "8.7",
                "imdbVotes": "1,900,000",
                "metascore": "73",
                "rottenTomatoes": "83%",
                "fetchedAt": 1700000000000,
            },
        )

    def test_from_dict_accepts_sparse_miss_entries(self) -> None:
        record = RatingRecord.from_dict({"imdbId": None, "fetchedAt": 42})
        self.assertIsNotNone(record)
        if record is not None:
            self.assertEqual(record.fetched_at, 42)
            self.assertIsNone(record.external_id)
            self.assertTrue(record.is_miss)

    def test_from_dict_rejects_missing_timestamp(self) -> None:
        self.assertIsNone(RatingRecord.from_dict({"imdbRating": "7.0"}))
        self.assertIsNone(RatingRecord.from_dict({"fetchedAt": "yesterday"}))
        self.assertIsNone(RatingRecord.from_dict({"fetchedAt": True}))

    def test_confirmed_miss_keeps_external_id_only(self) -> None:
        record = confirmed_miss("tt1", 5)
        self.assertEqual(record.external_id, "tt1")
        self.assertEqual(record.fetched_at, 5)
        self.assertTrue(record.is_miss)

    def test_cache_keys(self) -> None:
        self.assertEqual(cache_key_for(RatingSubject("movie", 603)), "movie:603")
        self.assertEqual(cache_key_for(RatingSubject("show", 1399)), "show:1399")
        self.assertEqual(
            cache_key_for(RatingSubject("show", 1399, season=1, episode=2)),
            "episode:1399:1:2",
        )

    def test_subject_validation(self) -> None:
        with self.assertRaises(ValueError):
            RatingSubject("person", 1)
        with self.assertRaises(ValueError):
            RatingSubject("show", 1, season=1)

    def test_normalize_subject_type(self) -> None:
        self.assertEqual(normalize_subject_type("TV"), "show")
        self.assertEqual(normalize_subject_type("film"), "movie")
        self.assertIsNone(normalize_subject_type("person"))

    def test_map_decoding_skips_bad_entries(self) -> None:
        raw = {
            "movie:1": {"imdbRating": "7.1", "fetchedAt": 10},
            "movie:2": {"imdbRating": "7.1"},
            "movie:3": "garbage",
        }
        decoded = ratings_map_from_json(raw)
        self.assertEqual(list(decoded), ["movie:1"])
        self.assertEqual(ratings_map_to_json(decoded)["movie:1"]["imdbRating"], "7.1")
        self.assertEqual(ratings_map_from_json(["not", "a", "map"]), {})


if __name__ == "__main__":
    unittest.main()
