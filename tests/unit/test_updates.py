import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

from fakes import FakeCatalog, make_record

from watchlog.exceptions import RunCancelled, StorageError
from watchlog.models import EPISODE_RELEASE, SEASON_RELEASE
from watchlog.storage import WatchlistStore
from watchlog.updates import UpdateChecker


def _tracked(season_number, mal_id, total=12, watched=0, title="Show"):
    return {
        "user_id": "u1",
        "title": title,
        "season_number": season_number,
        "mal_id": mal_id,
        "episodes_watched": watched,
        "total_episodes": total,
        "status": "watching",
        "cover_image": "https://cdn.example/show.jpg",
    }


class TestUpdateChecker(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.store = WatchlistStore(Path(self.tmp.name) / "watchlog.db")
        self.store.init_db()

    def tearDown(self):
        self.tmp.cleanup()

    def test_new_episode(self):
        entry = self.store.create_entries([_tracked(1, 1, total=12)])[0]
        catalog = FakeCatalog([make_record(1, "Show", episodes=13)])

        report = UpdateChecker(catalog, self.store).check("u1")

        self.assertEqual(report.episode_updates, 1)
        notifications = self.store.list_notifications("u1")
        self.assertEqual(len(notifications), 1)
        self.assertEqual(notifications[0].notification_type, EPISODE_RELEASE)
        self.assertEqual(notifications[0].episode_number, 13)
        self.assertEqual(notifications[0].anime_id, entry.id)
        self.assertIn("Episode 13", notifications[0].message)
        self.assertEqual(self.store.get_entry(entry.id).total_episodes, 13)

    def test_unchanged_show_is_quiet(self):
        self.store.create_entries([_tracked(1, 1, total=12)])
        catalog = FakeCatalog([make_record(1, "Show", episodes=12)])

        report = UpdateChecker(catalog, self.store).check("u1")

        self.assertEqual((report.episode_updates, report.new_seasons), (0, 0))
        self.assertEqual(self.store.list_notifications("u1"), [])

    def test_unknown_stored_count_is_not_compared(self):
        entry = self.store.create_entries([_tracked(1, 1, total=None)])[0]
        catalog = FakeCatalog([make_record(1, "Show", episodes=24)])

        report = UpdateChecker(catalog, self.store).check("u1")

        self.assertEqual(report.episode_updates, 0)
        self.assertIsNone(self.store.get_entry(entry.id).total_episodes)

    def test_new_season_from_title(self):
        first = self.store.create_entries([_tracked(1, 1)])[0]
        catalog = FakeCatalog(
            [
                make_record(1, "Show", sequels=[2]),
                make_record(
                    2, "Show Season 2", episodes=10, prequels=[1],
                    aired="2024-01-01T00:00:00+00:00",
                ),
            ]
        )

        report = UpdateChecker(catalog, self.store).check("u1")

        self.assertEqual(report.new_seasons, 1)
        seasons = self.store.list_entries_by_show_title("u1")["Show"]
        self.assertEqual([(s.season_number, s.mal_id) for s in seasons], [(1, 1), (2, 2)])
        stub = seasons[1]
        self.assertEqual(stub.episodes_watched, 0)
        self.assertEqual(stub.status, "watching")
        self.assertEqual(stub.total_episodes, 10)
        self.assertEqual(stub.cover_image, "https://cdn.example/show.jpg")

        notification = self.store.list_notifications("u1")[0]
        self.assertEqual(notification.notification_type, SEASON_RELEASE)
        self.assertEqual(notification.season_number, 2)
        self.assertEqual(notification.anime_id, first.id)

    def test_known_or_lower_seasons_are_skipped(self):
        self.store.create_entries([_tracked(1, 1), _tracked(2, 2), _tracked(3, 3)])
        catalog = FakeCatalog(
            [
                make_record(1, "Show", sequels=[2]),
                make_record(2, "Show Season 2", prequels=[1], sequels=[3, 4]),
                make_record(3, "Show Season 3", prequels=[2]),
                make_record(4, "Show Season 2 Recap", prequels=[2]),
            ]
        )

        report = UpdateChecker(catalog, self.store).check("u1")

        self.assertEqual(report.new_seasons, 0)
        self.assertEqual(len(self.store.list_entries("u1")), 3)

    def test_parts_and_excluded_types_are_skipped(self):
        self.store.create_entries([_tracked(1, 1)])
        catalog = FakeCatalog(
            [
                make_record(1, "Show", sequels=[2, 3, 4, 5]),
                make_record(2, "Show Part 2", prequels=[1]),
                make_record(3, "Show: The Movie", media_type="Movie", episodes=1),
                make_record(4, "Show OVA Season 5", media_type="OVA"),
                make_record(5, "Show: Next Arc", episodes=None),
            ]
        )

        report = UpdateChecker(catalog, self.store).check("u1")

        self.assertEqual(report.new_seasons, 0)
        self.assertEqual(self.store.list_notifications("u1"), [])

    def test_heuristic_season_gets_next_number(self):
        self.store.create_entries([_tracked(1, 1), _tracked(2, 2)])
        catalog = FakeCatalog(
            [
                make_record(1, "Show", sequels=[2]),
                make_record(
                    2, "Show Season 2", prequels=[1], sequels=[3],
                    aired="2021-01-01T00:00:00+00:00",
                ),
                make_record(
                    3, "Show: The Final Arc", prequels=[2],
                    aired="2023-01-01T00:00:00+00:00",
                ),
            ]
        )

        report = UpdateChecker(catalog, self.store).check("u1")

        self.assertEqual(report.new_seasons, 1)
        seasons = self.store.list_entries_by_show_title("u1")["Show"]
        self.assertEqual(seasons[-1].season_number, 3)
        self.assertEqual(seasons[-1].mal_id, 3)

    def test_manual_shows_are_not_checked(self):
        self.store.create_entries([_tracked(1, None)])
        catalog = FakeCatalog()

        report = UpdateChecker(catalog, self.store).check("u1")

        self.assertEqual(catalog.calls, [])
        self.assertEqual(report.failed_shows, [])

    def test_failing_show_does_not_stop_others(self):
        self.store.create_entries([_tracked(1, 1, title="Broken"), _tracked(1, 7)])
        catalog = FakeCatalog([make_record(7, "Show", episodes=13)])
        checker = UpdateChecker(catalog, self.store)
        original = checker._find_new_seasons

        def find_new_seasons(user_id, title, seasons, report):
            if title == "Broken":
                raise RuntimeError("bad data")
            return original(user_id, title, seasons, report)

        checker._find_new_seasons = find_new_seasons
        with self.assertLogs("watchlog.updates", level="ERROR"):
            report = checker.check("u1")

        self.assertEqual(report.failed_shows, ["Broken"])
        self.assertEqual(report.episode_updates, 1)

    def test_cancellation_propagates(self):
        self.store.create_entries([_tracked(1, 1)])
        fetcher = MagicMock()
        fetcher.fetch.side_effect = RunCancelled("stop")

        with self.assertRaises(RunCancelled):
            UpdateChecker(fetcher, self.store).check("u1")
        self.assertEqual(self.store.list_notifications("u1"), [])

    def test_cancelled_run_keeps_releases_for_next_run(self):
        alpha = self.store.create_entries([_tracked(1, 1, title="Alpha")])[0]
        self.store.create_entries([_tracked(1, 2, title="Beta")])
        catalog = FakeCatalog([make_record(1, "Alpha", episodes=13)])
        fetcher = MagicMock()

        def fetch(item_id):
            if item_id == 2:
                raise RunCancelled("stop")
            return catalog.fetch(item_id)

        fetcher.fetch.side_effect = fetch
        with self.assertRaises(RunCancelled):
            UpdateChecker(fetcher, self.store).check("u1")

        self.assertEqual(self.store.get_entry(alpha.id).total_episodes, 12)
        self.assertEqual(self.store.list_notifications("u1"), [])

        catalog = FakeCatalog(
            [make_record(1, "Alpha", episodes=13), make_record(2, "Beta", episodes=12)]
        )
        report = UpdateChecker(catalog, self.store).check("u1")

        self.assertEqual(report.episode_updates, 1)
        notifications = self.store.list_notifications("u1")
        self.assertEqual(len(notifications), 1)
        self.assertEqual(notifications[0].episode_number, 13)
        self.assertEqual(self.store.get_entry(alpha.id).total_episodes, 13)

    def test_failed_save_keeps_releases_for_next_run(self):
        entry = self.store.create_entries([_tracked(1, 1)])[0]
        catalog = FakeCatalog([make_record(1, "Show", episodes=13)])
        checker = UpdateChecker(catalog, self.store)

        with patch.object(
            WatchlistStore, "save_update_results", side_effect=StorageError("locked")
        ):
            with self.assertRaises(StorageError):
                checker.check("u1")
        self.assertEqual(self.store.get_entry(entry.id).total_episodes, 12)

        self.assertEqual(checker.check("u1").episode_updates, 1)
        self.assertEqual(len(self.store.list_notifications("u1")), 1)

    def test_failed_show_contributes_nothing(self):
        entry = self.store.create_entries([_tracked(1, 1)])[0]
        catalog = FakeCatalog([make_record(1, "Show", episodes=13)])
        checker = UpdateChecker(catalog, self.store)
        checker._find_new_seasons = MagicMock(side_effect=RuntimeError("bad data"))

        with self.assertLogs("watchlog.updates", level="ERROR"):
            report = checker.check("u1")

        self.assertEqual(report.failed_shows, ["Show"])
        self.assertEqual(report.episode_updates, 0)
        self.assertEqual(report.notifications, [])
        self.assertEqual(self.store.get_entry(entry.id).total_episodes, 12)

    def test_storage_error_propagates(self):
        store = MagicMock()
        store.list_entries_by_show_title.side_effect = StorageError("locked")

        with self.assertRaises(StorageError):
            UpdateChecker(FakeCatalog(), store).check("u1")


if __name__ == "__main__":
    unittest.main()
