import unittest
from unittest.mock import MagicMock, patch

from fakes import FakeCatalog, make_record

from watchlog.exceptions import RunCancelled
from watchlog.models import ResolutionState
from watchlog.resolver import SeasonResolver


class TestSeasonResolver(unittest.TestCase):
    def setUp(self):
        self.seed = make_record(1, "Show", episodes=12, sequels=[2])
        self.seed.image_url = "https://cdn.example/show.jpg"
        self.seed.score = 8.1

    def test_resolves_franchise(self):
        catalog = FakeCatalog(
            [
                self.seed,
                make_record(
                    2, "Show Season 2", episodes=10, prequels=[1],
                    aired="2021-04-01T00:00:00+00:00",
                ),
            ]
        )
        resolver = SeasonResolver(catalog)

        result = resolver.resolve(self.seed)

        self.assertEqual(result.state, ResolutionState.DONE)
        self.assertEqual(resolver.state, ResolutionState.DONE)
        self.assertEqual(result.title, "Show")
        self.assertEqual(result.seed_id, 1)
        self.assertEqual(
            [(s.mal_id, s.season_number, s.episodes) for s in result.seasons],
            [(1, 1, 12), (2, 2, 10)],
        )
        self.assertEqual(result.cover_image, "https://cdn.example/show.jpg")
        self.assertEqual(result.score, 8.1)
        self.assertEqual(result.total_episodes, 12)

    def test_numeric_air_date_does_not_force_fallback(self):
        sequel = make_record(2, "Show Season 2", prequels=[1], aired=20200101)
        catalog = FakeCatalog([self.seed, sequel])

        result = SeasonResolver(catalog).resolve(self.seed)

        self.assertEqual(result.state, ResolutionState.DONE)
        self.assertEqual(len(result.seasons), 2)

    def test_seed_fetch_failure_falls_back(self):
        catalog = FakeCatalog(failing=[1])
        resolver = SeasonResolver(catalog)

        result = resolver.resolve(self.seed)

        self.assertEqual(result.state, ResolutionState.FALLBACK)
        self.assertEqual(len(result.seasons), 1)
        season = result.seasons[0]
        self.assertEqual(season.title, "Show")
        self.assertEqual(season.episodes, 12)
        self.assertEqual(season.season_number, 1)
        self.assertTrue(season.selected)
        self.assertEqual(catalog.calls, [1])

    def test_seed_exception_falls_back(self):
        catalog = FakeCatalog(raising=[1])
        result = SeasonResolver(catalog).resolve(self.seed)
        self.assertEqual(result.state, ResolutionState.FALLBACK)

    def test_nothing_assembled_falls_back(self):
        movie = make_record(1, "Show Movie", episodes=1, media_type="Movie")
        result = SeasonResolver(FakeCatalog([movie])).resolve(movie)

        self.assertEqual(result.state, ResolutionState.FALLBACK)
        self.assertEqual([s.mal_id for s in result.seasons], [1])

    def test_assembly_error_falls_back(self):
        with patch("watchlog.resolver.assemble", side_effect=ValueError("bad")):
            result = SeasonResolver(FakeCatalog([self.seed])).resolve(self.seed)
        self.assertEqual(result.state, ResolutionState.FALLBACK)

    def test_cancel_returns_to_idle(self):
        fetcher = MagicMock()
        fetcher.fetch.side_effect = RunCancelled("stop")
        resolver = SeasonResolver(fetcher)

        with self.assertRaises(RunCancelled):
            resolver.resolve(self.seed)
        self.assertEqual(resolver.state, ResolutionState.IDLE)


if __name__ == "__main__":
    unittest.main()
