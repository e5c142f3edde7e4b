import os
import unittest
from pathlib import Path
from unittest.mock import patch

from fonts import DEFAULT_BOLD_FONT, DEFAULT_REGULAR_FONT
from settings import Settings


@patch("settings.load_dotenv")
class SettingsTests(unittest.TestCase):
    def test_defaults(self, _dotenv) -> None:
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings.from_env()
        self.assertEqual(settings.api_url, "https://api.gskis.com/api")
        self.assertEqual(settings.site_url, "https://gskis.com")
        self.assertIsNone(settings.api_timeout)
        self.assertEqual(settings.font_files.regular, DEFAULT_REGULAR_FONT)
        self.assertEqual(settings.font_files.bold, DEFAULT_BOLD_FONT)
        self.assertEqual(settings.cache_ttl_seconds, 600.0)
        self.assertEqual(settings.cache_max_entries, 100)

    def test_overrides(self, _dotenv) -> None:
        env = {
            "MEETINGS_API_URL": "http://localhost:3000/api",
            "MEETINGS_SITE_URL": "http://localhost:5173",
            "MEETINGS_API_TIMEOUT": "2.5",
            "OG_FONT_REGULAR": "/srv/fonts/Sans.ttf",
            "OG_FONT_BOLD": "/srv/fonts/Sans-Bold.ttf",
            "OG_CACHE_TTL_SECONDS": "30",
            "OG_CACHE_MAX_ENTRIES": "8",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = Settings.from_env()
        self.assertEqual(settings.api_url, "http://localhost:3000/api")
        self.assertEqual(settings.site_url, "http://localhost:5173")
        self.assertEqual(settings.api_timeout, 2.5)
        self.assertEqual(settings.font_files.regular, Path("/srv/fonts/Sans.ttf"))
        self.assertEqual(settings.font_files.bold, Path("/srv/fonts/Sans-Bold.ttf"))
        self.assertEqual(settings.cache_ttl_seconds, 30.0)
        self.assertEqual(settings.cache_max_entries, 8)

    def test_invalid_numbers(self, _dotenv) -> None:
        for name, value in (
            ("OG_CACHE_TTL_SECONDS", "soon"),
            ("OG_CACHE_MAX_ENTRIES", "0"),
            ("MEETINGS_API_TIMEOUT", "-1"),
        ):
            with self.subTest(name=name), patch.dict(os.environ, {name: value}, clear=True):
                with self.assertRaises(RuntimeError):
                    Settings.from_env()


if __name__ == "__main__":
    unittest.main()
