import logging
import unittest

from settings import Settings, parse_args


class SettingsTests(unittest.TestCase):
    def test_defaults(self) -> None:
        settings = parse_args([])
        self.assertEqual(settings, Settings())
        self.assertEqual(settings.items_file, "inventory.json")
        self.assertEqual(settings.locations_file, "locations.json")
        self.assertEqual(settings.numeric_log_level, logging.WARNING)

    def test_paths_and_level(self) -> None:
        settings = parse_args(["--items-file", "data/items.json", "--labels-dir", "out", "--log-level", "debug"])
        self.assertEqual(settings.items_file, "data/items.json")
        self.assertEqual(settings.labels_dir, "out")
        self.assertEqual(settings.numeric_log_level, logging.DEBUG)

    def test_verbose_flag(self) -> None:
        self.assertEqual(parse_args(["-v"]).log_level, "INFO")
        self.assertEqual(parse_args(["-v", "--log-level", "DEBUG"]).log_level, "DEBUG")

    def test_unknown_level_rejected(self) -> None:
        with self.assertRaises(ValueError):
            Settings(log_level="LOUD")


if __name__ == "__main__":
    unittest.main(verbosity=2)
