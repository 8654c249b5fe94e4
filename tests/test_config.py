"""
Tests for configuration models, YAML loading and logging setup.
"""

import json
import logging

import pytest
import structlog
from pydantic import ValidationError

from ogextract.config import Config, CustomMetaTag, ExtractOptions, MonitoringConfig, find_config_file, load_config
from ogextract.observability import add_source_host, configure_logging
from ogextract.protocols import ConfigError


class TestExtractOptions:
    def test_defaults(self):
        options = ExtractOptions()
        assert options.custom_meta_tags == []
        assert options.all_media is False
        assert options.only_get_open_graph_info is False
        assert options.og_image_fallback is False

    def test_camel_case_aliases(self):
        options = ExtractOptions.model_validate(
            {
                "allMedia": True,
                "onlyGetOpenGraphInfo": True,
                "ogImageFallback": True,
                "customMetaTags": [{"property": "foo", "fieldName": "fooTag"}],
            }
        )
        assert options.all_media and options.only_get_open_graph_info and options.og_image_fallback
        assert options.custom_meta_tags == [CustomMetaTag(property="foo", field_name="fooTag", multiple=False)]

    def test_merged_accepts_both_spellings(self):
        base = ExtractOptions(allMedia=True)
        merged = base.merged(ogImageFallback=True, only_get_open_graph_info=True)
        assert merged.all_media and merged.og_image_fallback and merged.only_get_open_graph_info
        # The original is untouched
        assert base.og_image_fallback is False

    def test_merged_without_overrides_returns_self(self):
        options = ExtractOptions()
        assert options.merged() is options

    def test_options_are_frozen(self):
        with pytest.raises(ValidationError):
            ExtractOptions().all_media = True

    @pytest.mark.parametrize("tag", [{"property": "", "fieldName": "x"}, {"property": "foo", "fieldName": "  "}])
    def test_blank_custom_tags_are_rejected(self, tag):
        with pytest.raises(ValidationError):
            CustomMetaTag.model_validate(tag)


class TestConfig:
    def test_defaults(self):
        config = Config()
        assert config.cache.enabled is False
        assert config.client.max_concurrency == 5
        assert config.monitoring.log_level == "INFO"

    def test_log_level_is_normalised(self):
        assert MonitoringConfig(log_level="debug").log_level == "DEBUG"
        with pytest.raises(ValidationError):
            MonitoringConfig(log_level="chatty")

    def test_log_file_parent_is_created(self, tmp_path):
        log_file = tmp_path / "logs" / "nested" / "ogextract.log"
        MonitoringConfig(log_file=str(log_file))
        assert log_file.parent.is_dir()

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "ogextract.yaml"
        path.write_text(
            """
extraction:
  allMedia: true
  customMetaTags:
    - property: foo
      fieldName: fooTag
      multiple: true
cache:
  enabled: true
  ttl_seconds: 30
client:
  timeout: 2.5
"""
        )
        config = Config.from_yaml(path)
        assert config.extraction.all_media is True
        assert config.extraction.custom_meta_tags[0].multiple is True
        assert config.cache.enabled is True
        assert config.cache.ttl_seconds == 30
        assert config.client.timeout == 2.5

    def test_empty_yaml_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert Config.from_yaml(path) == Config()

    @pytest.mark.parametrize("content", ["key: [unclosed", "- just\n- a list\n"])
    def test_bad_yaml_raises_config_error(self, tmp_path, content):
        path = tmp_path / "bad.yaml"
        path.write_text(content)
        with pytest.raises(ConfigError):
            Config.from_yaml(path)

    def test_missing_file_raises_config_error(self, tmp_path):
        with pytest.raises(ConfigError):
            Config.from_yaml(tmp_path / "nope.yaml")

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("OGEXTRACT_CLIENT__TIMEOUT", "7")
        monkeypatch.setenv("OGEXTRACT_EXTRACTION__ALL_MEDIA", "true")
        config = Config()
        assert config.client.timeout == 7
        assert config.extraction.all_media is True

    def test_find_and_load_config(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert find_config_file() is None
        assert load_config() == Config()

        (tmp_path / "ogextract.yml").write_text("client:\n  max_concurrency: 9\n")
        assert find_config_file() == tmp_path / "ogextract.yml"
        assert load_config().client.max_concurrency == 9


class TestLogging:
    def test_configure_logging_sets_level(self):
        configure_logging(MonitoringConfig(log_level="WARNING"))
        assert logging.getLogger().level == logging.WARNING

    def test_configure_logging_to_file(self, tmp_path):
        log_file = tmp_path / "ogextract.log"
        configure_logging(MonitoringConfig(log_level="INFO", log_file=str(log_file)))
        logging.getLogger("ogextract.test").info("written to file")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "written to file" in log_file.read_text()

    def test_add_source_host(self):
        event = add_source_host(logging.getLogger(), "info", {"event": "x", "source_url": "https://Example.com:8443/a"})
        assert event["source_host"] == "example.com"
        assert "source_host" not in add_source_host(logging.getLogger(), "info", {"event": "x"})
        assert "source_host" not in add_source_host(logging.getLogger(), "info", {"source_url": "not a url"})

    def test_bound_url_host_reaches_log_file(self, tmp_path):
        log_file = tmp_path / "ogextract.log"
        configure_logging(MonitoringConfig(log_level="INFO", log_file=str(log_file)))
        with structlog.contextvars.bound_contextvars(source_url="https://news.example.org/story"):
            logging.getLogger("ogextract.test").info("fetched")
        for handler in logging.getLogger().handlers:
            handler.flush()
        line = next(line for line in log_file.read_text().splitlines() if "fetched" in line)
        record = json.loads(line)
        assert record["source_url"] == "https://news.example.org/story"
        assert record["source_host"] == "news.example.org"
