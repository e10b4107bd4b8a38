"""Tests for configuration sources."""

import json

from vcap_services.settings import Settings
from vcap_services.sources import EnvironmentSnapshot, parse_catalog, parse_json_object


class TestParseJsonObject:
    """Tests for soft JSON object parsing."""

    def test_parses_object(self):
        """JSON objects are parsed."""
        assert parse_json_object('{"url": "u"}') == {"url": "u"}

    def test_copies_mappings(self):
        """Mappings are copied, not shared."""
        value = {"url": "u"}
        parsed = parse_json_object(value)
        assert parsed == value
        assert parsed is not value

    def test_malformed_values(self):
        """Text that is not a JSON object gives None."""
        assert parse_json_object("Not JSON", key="OBJECT_STORAGE_6J") is None
        assert parse_json_object("[1, 2]") is None
        assert parse_json_object('"text"') is None
        assert parse_json_object("") is None
        assert parse_json_object(None) is None
        assert parse_json_object(42) is None


class TestParseCatalog:
    """Tests for catalog parsing."""

    def test_parses_instances(self, catalog_data):
        """Each service maps to its instances in order."""
        catalog = parse_catalog(json.dumps(catalog_data))
        assert list(catalog) == list(catalog_data)
        assert [i.name for i in catalog["natural_language_classifier"]] == ["NLC 1", "NLC 2"]
        assert catalog["object_storage"][0].tags == ["eu"]
        assert catalog["retrieve_and_rank"][0].label == "retrieve_and_rank"

    def test_instances_without_credentials(self, catalog_data):
        """Missing and empty credentials both parse as empty."""
        catalog = parse_catalog(catalog_data)
        first, second, third = catalog["personality_insights"]
        assert first.has_credentials is False
        assert second.has_credentials is False
        assert third.has_credentials is True

    def test_skips_malformed_parts(self):
        """Non-list services and non-object instances are skipped."""
        catalog = parse_catalog(
            {"broken": "oops", "mixed": ["x", {"name": "ok", "credentials": {"a": "b"}}]}
        )
        assert "broken" not in catalog
        assert [i.name for i in catalog["mixed"]] == ["ok"]

    def test_malformed_catalog(self):
        """A catalog that is not a JSON object is empty."""
        assert parse_catalog("Not JSON") == {}
        assert parse_catalog("") == {}
        assert parse_catalog(None) == {}


class TestEnvironmentSnapshot:
    """Tests for snapshot construction."""

    def test_from_environ(self, environ):
        """The catalog variable is parsed and left out of the entries."""
        snapshot = EnvironmentSnapshot.from_environ(environ, Settings())
        assert "personality_insights" in snapshot.catalog
        assert "VCAP_SERVICES" not in snapshot.entries
        assert "CONVERSATION_W1" in snapshot.entries

    def test_entries_sorted(self):
        """Entries are kept in lexicographic key order."""
        snapshot = EnvironmentSnapshot.from_environ({"B_KEY": "1", "A_KEY": "2"}, Settings())
        assert list(snapshot.entries) == ["A_KEY", "B_KEY"]

    def test_custom_catalog_variable(self, catalog_data):
        """The catalog variable name comes from settings."""
        environ = {"MY_CATALOG": json.dumps(catalog_data)}
        snapshot = EnvironmentSnapshot.from_environ(
            environ, Settings(catalog_env_var="MY_CATALOG")
        )
        assert "object_storage" in snapshot.catalog
        assert snapshot.entries == {}

    def test_reads_process_environment(self, monkeypatch, catalog_data):
        """Without an explicit mapping the process environment is used."""
        monkeypatch.setenv("VCAP_SERVICES", json.dumps(catalog_data))
        snapshot = EnvironmentSnapshot.from_environ()
        assert "natural_language_classifier" in snapshot.catalog

    def test_from_data(self, catalog_data):
        """Snapshots can be built from loaded data."""
        snapshot = EnvironmentSnapshot.from_data(catalog_data, {"KEY": "{}"})
        assert snapshot.catalog["object_storage"][1].name == "OS 2"
        assert snapshot.entries == {"KEY": "{}"}
