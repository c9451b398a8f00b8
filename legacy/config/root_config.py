"""Root application context: services, repositories, mappers and aspects."""

from pathlib import Path
from typing import ClassVar, Optional, Tuple

from legacy.common.aop import TransactionalAspect
from legacy.config.db_config import DataAccessConfiguration
from legacy.config.properties import load_database_properties
from legacy.constants import Database
from legacy.context import ApplicationContext, ComponentScan, Configuration
from legacy.core.exceptions import ComponentScanError
from legacy.core.settings import AppSettings
from legacy.db.data_source import PoolPolicy
from legacy.health.repository.mapper import HealthMapper
from legacy.health.service import HealthService

ROOT_SCAN = ComponentScan(
    base_packages=(
        "legacy.*.service",
        "legacy.*.repository",
        "legacy.*.repository.mapper",
        "legacy.common.aop",
        "legacy.common.util",
    ),
    exclude=(
        "*.controller",
        "*.common.advice",
        "*.common.interceptor",
        "legacy_web",
    ),
)

MAPPER_SCAN = ComponentScan(base_packages=Database.MAPPER_PACKAGES)


class RootConfig(Configuration):
    """
    Non-web tier shared by every dispatcher.

    Owns the data-access singletons. Nothing registered here may depend on
    the web context.
    """

    name = "root"
    component_scan = ROOT_SCAN
    mappers: ClassVar[Tuple[type, ...]] = (HealthMapper,)
    components = (TransactionalAspect, HealthMapper, HealthService)

    def __init__(self, settings: AppSettings, policy: Optional[PoolPolicy] = None):
        """
        Initialize root configuration.

        Args:
            settings: Application settings (location of the properties file)
            policy: Pool policy, defaults to 10 max / 5 idle / 30s
        """
        self.settings = settings
        self.database_properties = Path(settings.database_properties)
        self.policy = policy
        self._data_access: Optional[DataAccessConfiguration] = None

    @property
    def data_access(self) -> DataAccessConfiguration:
        """
        Data-access configuration, loading the properties on first use.

        Raises:
            MissingPropertyError: If a db.* key is missing
        """
        if self._data_access is None:
            properties = load_database_properties(self.database_properties)
            self._data_access = DataAccessConfiguration(properties, self.policy)
        return self._data_access

    def register_beans(self, context: ApplicationContext) -> None:
        self.data_access.register_beans(context)

    def validate(self) -> None:
        for mapper in self.mappers:
            reason = MAPPER_SCAN.rejection_reason(mapper.__module__)
            if reason is not None:
                raise ComponentScanError(mapper.__qualname__, self.name, reason)
