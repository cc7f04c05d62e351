"""Tests for configuration loading."""

import httpx

from omnisearch import template
from omnisearch.config import DEFAULT_TIMEOUT, Config


class TestConfig:
    def test_defaults_when_missing(self, tmp_path):
        config = Config.load(str(tmp_path / "missing.json"))
        assert config.application_name == template.DEFAULT_APPLICATION_NAME
        assert config.language is None
        assert config.timeout == DEFAULT_TIMEOUT

    def test_save_and_load(self, tmp_path):
        path = str(tmp_path / "nested" / "config.json")
        Config(application_name="MyBrowser", language="fr_FR", timeout=2.5).save(path)

        config = Config.load(path)
        assert config.application_name == "MyBrowser"
        assert config.language == "fr_FR"
        assert config.timeout == 2.5

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json")
        assert Config.load(str(path)) == Config()

    def test_apply(self):
        Config(application_name="MyBrowser", language="fr_FR").apply()
        assert template.expand("x", "{source}/{language}") == "MyBrowser/fr-FR"

    def test_create_client(self):
        client = Config(user_agent="Test/2.0").create_client()
        assert isinstance(client, httpx.AsyncClient)
        assert client.headers["User-Agent"] == "Test/2.0"
