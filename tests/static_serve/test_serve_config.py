import datetime as dt
import tempfile
import unittest
from pathlib import Path

from app_config_schema import CacheControlSettings, ServerSettings, StaticSettings
from static_serve.config import (
    CacheControlDirectives,
    ServeConfig,
    ServeConfigurationError,
    ServerConfig,
)


class ServeConfigTests(unittest.TestCase):
    def test_from_settings_builds_directives_and_overrides(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            expires = dt.datetime(2030, 1, 1, tzinfo=dt.timezone.utc)
            settings = StaticSettings(
                root=temp_dir,
                content_types={"VUE": "application/vue", ".Map": "application/json"},
                cache_control=CacheControlSettings(public=True, max_age=3600),
                expires=expires,
            )

            config = ServeConfig.from_settings(settings)

            self.assertEqual(Path(temp_dir).resolve(), config.root)
            self.assertEqual(
                {".vue": "application/vue", ".map": "application/json"},
                dict(config.content_type_map),
            )
            self.assertEqual(
                CacheControlDirectives(public=True, max_age=3600),
                config.cache_control,
            )
            self.assertEqual(expires, config.expires)

    def test_without_cache_control_settings(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config = ServeConfig.from_settings(StaticSettings(root=temp_dir))
            self.assertIsNone(config.cache_control)
            self.assertIsNone(config.expires)

    def test_override_map_is_read_only(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config = ServeConfig(root=Path(temp_dir), content_type_map={".vue": "x/y"})
            with self.assertRaises(TypeError):
                config.content_type_map[".js"] = "text/plain"  # type: ignore[index]

    def test_rejects_missing_or_file_root(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            file_root = Path(temp_dir) / "index.html"
            file_root.write_text("x", encoding="utf-8")
            with self.assertRaises(ServeConfigurationError):
                ServeConfig(root=Path(temp_dir) / "missing")
            with self.assertRaises(ServeConfigurationError):
                ServeConfig(root=file_root)

    def test_rejects_empty_content_type(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            with self.assertRaises(ServeConfigurationError):
                ServeConfig(root=Path(temp_dir), content_type_map={".vue": " "})


class ServerConfigTests(unittest.TestCase):
    def test_from_settings(self) -> None:
        config = ServerConfig.from_settings(
            ServerSettings(host="0.0.0.0", port=9988, max_body_bytes=1024)
        )
        self.assertEqual(
            ("0.0.0.0", 9988, 1024),
            (config.host, config.port, config.max_body_bytes),
        )

    def test_rejects_invalid_host_or_port(self) -> None:
        with self.assertRaises(ServeConfigurationError):
            ServerConfig(host=" ")
        with self.assertRaises(ServeConfigurationError):
            ServerConfig(port=70000)
        with self.assertRaises(ServeConfigurationError):
            ServerConfig(max_body_bytes=0)


if __name__ == "__main__":
    unittest.main()
