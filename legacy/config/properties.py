"""Database properties loaded from the external key/value store.

The store is a ``database.properties`` file of ``key=value`` lines (the
``key: value`` and whitespace-separated forms are rejected)::

    db.driver=postgresql
    db.url=postgresql://localhost:5432/legacy
    db.username=legacy
    db.password=change-me

``DB_DRIVER``, ``DB_URL``, ``DB_USERNAME`` and ``DB_PASSWORD`` environment
variables take precedence over the file.
"""

import re
from pathlib import Path
from typing import Any, Dict, Tuple, Type, Union
from urllib.parse import urlparse

from dotenv import dotenv_values
from loguru import logger
from pydantic import SecretStr, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from legacy.common.util import mask_database_url
from legacy.constants import Database, Properties
from legacy.core.exceptions import ConfigurationError, InvalidPropertyError, MissingPropertyError

_PREFIX = "db."
_KEY_SEPARATOR = re.compile(r"[\s:]")


class DatabaseProperties(BaseSettings):
    """Connection settings of the pooled data source. Every field is required."""

    driver: str
    url: str
    username: str
    password: SecretStr

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        # environment first, then the values read from the properties file
        return env_settings, init_settings

    @property
    def dsn(self) -> str:
        """Connection URL without a ``jdbc:`` prefix."""
        return self.url[len("jdbc:"):] if self.url.startswith("jdbc:") else self.url

    @property
    def masked_url(self) -> str:
        return mask_database_url(self.dsn)


def _check_syntax(path: Path) -> None:
    # dotenv reads key=value only; other forms would surface as missing keys
    for lineno, line in enumerate(path.read_text(encoding="utf-8").splitlines(), start=1):
        stripped = line.strip()
        if not stripped.startswith(_PREFIX):
            continue
        key, sep, _ = stripped.partition("=")
        if not sep or _KEY_SEPARATOR.search(key.strip()):
            name = _KEY_SEPARATOR.split(key.strip(), maxsplit=1)[0]
            raise InvalidPropertyError(
                name, f"line {lineno} of {path.name} is not in 'key=value' form"
            )


def read_properties_file(path: Union[str, Path]) -> Dict[str, str]:
    """
    Read ``db.*`` keys from a properties file.

    Args:
        path: Properties file

    Returns:
        Mapping of field name (``driver``, ``url``...) to non-empty value

    Raises:
        ConfigurationError: If the file does not exist
        InvalidPropertyError: If a ``db.`` line is not in ``key=value`` form
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigurationError(
            f"Properties file not found: {path}", details={"source": str(path)}
        )
    _check_syntax(path)
    values: Dict[str, str] = {}
    for key, value in dotenv_values(path).items():
        if key.startswith(_PREFIX) and value:
            values[key[len(_PREFIX):]] = value.strip()
    return values


def _validate_driver(properties: DatabaseProperties) -> None:
    driver = properties.driver.lower()
    if driver not in Database.SUPPORTED_DRIVERS:
        raise InvalidPropertyError(
            Properties.DRIVER,
            f"unsupported driver '{properties.driver}' "
            f"(supported: {', '.join(Database.SUPPORTED_DRIVERS)})",
        )
    scheme = urlparse(properties.dsn).scheme.lower()
    if scheme not in Database.SUPPORTED_DRIVERS:
        raise InvalidPropertyError(
            Properties.URL, f"URL scheme '{scheme}' does not match driver '{properties.driver}'"
        )


def load_database_properties(path: Union[str, Path]) -> DatabaseProperties:
    """
    Resolve the database properties; any missing key aborts startup.

    Args:
        path: Properties file (``database.properties``)

    Returns:
        Validated, immutable DatabaseProperties

    Raises:
        MissingPropertyError: If any of db.driver, db.url, db.username,
            db.password cannot be resolved
        InvalidPropertyError: If the driver is unsupported or the URL does not match it
        ConfigurationError: If the properties file does not exist
    """
    file_values: Dict[str, Any] = read_properties_file(path)
    try:
        properties = DatabaseProperties(**file_values)
    except ValidationError as e:
        missing = {
            f"{_PREFIX}{error['loc'][0]}"
            for error in e.errors()
            if error["type"] == "missing" and error["loc"]
        }
        if missing:
            raise MissingPropertyError(missing, source=str(path)) from e
        raise ConfigurationError(f"Invalid database properties: {e}") from e

    # an empty environment variable overrides the file with nothing
    empty = {
        key
        for key, value in (
            (Properties.DRIVER, properties.driver),
            (Properties.URL, properties.url),
            (Properties.USERNAME, properties.username),
            (Properties.PASSWORD, properties.password.get_secret_value()),
        )
        if not value.strip()
    }
    if empty:
        raise MissingPropertyError(empty, source=str(path))

    _validate_driver(properties)
    logger.info(
        f"Database properties loaded from {path} "
        f"(driver={properties.driver}, url={properties.masked_url})"
    )
    return properties
