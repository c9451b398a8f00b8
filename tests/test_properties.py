"""Tests for database properties loading."""

import pytest
from pydantic import SecretStr

from legacy.config.properties import load_database_properties, read_properties_file
from legacy.core.exceptions import (
    ConfigurationError,
    InvalidPropertyError,
    MissingPropertyError,
)


def write_properties(tmp_path, text):
    path = tmp_path / "database.properties"
    path.write_text(text)
    return path


class TestLoadDatabaseProperties:
    """Tests for load_database_properties."""

    def test_loads_all_keys(self, properties_file):
        properties = load_database_properties(properties_file)

        assert properties.driver == "postgresql"
        assert properties.url == "postgresql://localhost:5432/legacy_test"
        assert properties.username == "legacy"
        assert isinstance(properties.password, SecretStr)
        assert properties.password.get_secret_value() == "s3cr3t-pw"

    def test_password_hidden_in_repr(self, properties_file):
        properties = load_database_properties(properties_file)

        assert "s3cr3t-pw" not in repr(properties)
        assert "s3cr3t-pw" not in properties.masked_url

    def test_jdbc_prefix_stripped_from_dsn(self, tmp_path):
        path = write_properties(
            tmp_path,
            "db.driver=postgresql\n"
            "db.url=jdbc:postgresql://db:5432/app\n"
            "db.username=u\n"
            "db.password=p\n",
        )
        properties = load_database_properties(path)

        assert properties.dsn == "postgresql://db:5432/app"

    def test_missing_password_is_fatal(self, tmp_path):
        path = write_properties(
            tmp_path,
            "db.driver=postgresql\n"
            "db.url=postgresql://localhost/app\n"
            "db.username=legacy\n",
        )

        with pytest.raises(MissingPropertyError) as exc_info:
            load_database_properties(path)

        assert exc_info.value.keys == ["db.password"]
        assert "db.password" in str(exc_info.value)

    def test_every_missing_key_is_reported(self, tmp_path):
        path = write_properties(tmp_path, "db.driver=postgresql\n")

        with pytest.raises(MissingPropertyError) as exc_info:
            load_database_properties(path)

        assert exc_info.value.keys == ["db.password", "db.url", "db.username"]

    def test_empty_value_counts_as_missing(self, tmp_path):
        path = write_properties(
            tmp_path,
            "db.driver=postgresql\n"
            "db.url=postgresql://localhost/app\n"
            "db.username=\n"
            "db.password=p\n",
        )

        with pytest.raises(MissingPropertyError) as exc_info:
            load_database_properties(path)

        assert exc_info.value.keys == ["db.username"]

    def test_missing_file_is_fatal(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_database_properties(tmp_path / "nope.properties")

    def test_environment_overrides_file(self, properties_file, monkeypatch):
        monkeypatch.setenv("DB_URL", "postgresql://prod-db:5432/legacy")

        properties = load_database_properties(properties_file)

        assert properties.url == "postgresql://prod-db:5432/legacy"
        assert properties.username == "legacy"

    def test_environment_supplies_missing_key(self, tmp_path, monkeypatch):
        path = write_properties(
            tmp_path,
            "db.driver=postgresql\n"
            "db.url=postgresql://localhost/app\n"
            "db.username=legacy\n",
        )
        monkeypatch.setenv("DB_PASSWORD", "from-env")

        properties = load_database_properties(path)

        assert properties.password.get_secret_value() == "from-env"

    def test_empty_environment_override_is_fatal(self, properties_file, monkeypatch):
        monkeypatch.setenv("DB_PASSWORD", "")

        with pytest.raises(MissingPropertyError) as exc_info:
            load_database_properties(properties_file)

        assert exc_info.value.keys == ["db.password"]

    def test_unsupported_driver(self, tmp_path):
        path = write_properties(
            tmp_path,
            "db.driver=com.mysql.jdbc.Driver\n"
            "db.url=postgresql://localhost/app\n"
            "db.username=u\n"
            "db.password=p\n",
        )

        with pytest.raises(InvalidPropertyError) as exc_info:
            load_database_properties(path)

        assert exc_info.value.key == "db.driver"

    def test_url_scheme_must_match_driver(self, tmp_path):
        path = write_properties(
            tmp_path,
            "db.driver=postgresql\n"
            "db.url=mysql://localhost/app\n"
            "db.username=u\n"
            "db.password=p\n",
        )

        with pytest.raises(InvalidPropertyError) as exc_info:
            load_database_properties(path)

        assert exc_info.value.key == "db.url"

    def test_properties_are_immutable(self, database_properties):
        with pytest.raises(Exception):
            database_properties.url = "postgresql://elsewhere/db"


class TestReadPropertiesFile:
    """Tests for read_properties_file."""

    def test_ignores_comments_and_foreign_keys(self, tmp_path):
        path = write_properties(
            tmp_path,
            "# connection settings\n"
            "db.driver=postgresql\n"
            "app.name=legacy\n",
        )

        assert read_properties_file(path) == {"driver": "postgresql"}

    def test_colon_separator_rejected(self, tmp_path):
        path = write_properties(
            tmp_path,
            "db.driver: postgresql\n"
            "db.url=postgresql://localhost/app\n",
        )

        with pytest.raises(InvalidPropertyError) as exc_info:
            read_properties_file(path)

        assert exc_info.value.key == "db.driver"
        assert "line 1" in str(exc_info.value)

    def test_colon_separator_with_equals_in_value(self, tmp_path):
        path = write_properties(tmp_path, "db.url: postgresql://localhost/app?sslmode=require\n")

        with pytest.raises(InvalidPropertyError) as exc_info:
            read_properties_file(path)

        assert exc_info.value.key == "db.url"

    def test_spaces_around_equals_accepted(self, tmp_path):
        path = write_properties(tmp_path, "db.driver = postgresql\n")

        assert read_properties_file(path) == {"driver": "postgresql"}
