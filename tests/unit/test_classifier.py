import unittest

from watchlog.classifier import extract_season_info, is_new_season, strip_season_markers


class TestExtractSeasonInfo(unittest.TestCase):
    def test_season_keyword(self):
        info = extract_season_info("Attack on Titan Season 3")
        self.assertEqual(info.season, 3)
        self.assertIsNone(info.part)
        self.assertFalse(info.is_part)

    def test_ordinal_season(self):
        self.assertEqual(extract_season_info("Kaguya-sama 2nd Season").season, 2)
        self.assertEqual(extract_season_info("Overlord 4th season").season, 4)

    def test_season_and_part(self):
        info = extract_season_info("Attack on Titan Season 3 Part 2")
        self.assertEqual(info.season, 3)
        self.assertEqual(info.part, 2)
        self.assertTrue(info.is_part)

    def test_cour_markers(self):
        self.assertEqual(extract_season_info("Show Cour 2").part, 2)
        self.assertEqual(extract_season_info("Show 2nd Cour").part, 2)
        self.assertEqual(extract_season_info("Show 3rd Part").part, 3)

    def test_case_insensitive(self):
        info = extract_season_info("SHOW SEASON 2 PART 2")
        self.assertEqual(info.season, 2)
        self.assertEqual(info.part, 2)

    def test_no_markers(self):
        info = extract_season_info("Cowboy Bebop")
        self.assertIsNone(info.season)
        self.assertIsNone(info.part)

    def test_first_match_wins(self):
        self.assertEqual(extract_season_info("Season 2 Season 5").season, 2)

    def test_idempotent(self):
        title = "Mob Psycho 100 Season 3 Part 2"
        self.assertEqual(extract_season_info(title), extract_season_info(title))


class TestIsNewSeason(unittest.TestCase):
    def test_continuation_markers_are_not_new_seasons(self):
        for title in (
            "Show Part 2",
            "Show part 3",
            "Show Cour 2",
            "Show 2nd Cour",
            "Show Second Part",
        ):
            self.assertFalse(is_new_season(title, "Show"), title)

    def test_continuation_beats_season_marker(self):
        self.assertFalse(is_new_season("Show Season 2 Part 2", "Show"))

    def test_explicit_new_season(self):
        for title in ("Show Season 2", "Show 3rd Season", "Show Second Season"):
            self.assertTrue(is_new_season(title, "Show"), title)

    def test_same_title_is_not_new(self):
        self.assertFalse(is_new_season("Show", "Show"))

    def test_bare_marker_remainder_is_not_new(self):
        self.assertFalse(is_new_season("Show Season 7", "Show"))
        self.assertFalse(is_new_season("Show cour 5", "show"))

    def test_meaningful_remainder_is_new(self):
        self.assertTrue(is_new_season("Show: The Final Arc", "Show"))


class TestStripSeasonMarkers(unittest.TestCase):
    def test_strips_markers(self):
        self.assertEqual(strip_season_markers("Show Season 2"), "Show")
        self.assertEqual(strip_season_markers("Show 2nd Season Part 2"), "Show")
        self.assertEqual(strip_season_markers("Show: Season 3"), "Show")

    def test_keeps_plain_title(self):
        self.assertEqual(strip_season_markers("Cowboy Bebop"), "Cowboy Bebop")


if __name__ == "__main__":
    unittest.main()
