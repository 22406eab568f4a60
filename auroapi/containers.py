import threading

from dependency_injector import containers, providers

from auroapi.config import get_settings
from auroapi.database.connection import Database
from auroapi.services.market_insight_service import MarketInsightService


class ConfigModule(containers.DeclarativeContainer):
    """Application configuration."""

    config = providers.Singleton(get_settings)


class RepositoryModule(containers.DeclarativeContainer):
    """Database handle and ledger serialization lock."""

    config = providers.DependenciesContainer()

    database = providers.Singleton(Database, settings=config.config)
    # 모든 원장 변경은 이 잠금 하나로 직렬화된다
    ledger_lock = providers.Singleton(threading.RLock)


class ServiceModule(containers.DeclarativeContainer):
    """Service layer dependencies."""

    config = providers.DependenciesContainer()

    market_insight_service = providers.Factory(
        MarketInsightService, settings=config.config
    )


class Container(containers.DeclarativeContainer):
    """Application container."""

    wiring_config = containers.WiringConfiguration(
        modules=[
            "auroapi.routers.price_router",
        ],
    )

    config = providers.Container(ConfigModule)
    repositories = providers.Container(RepositoryModule, config=config)
    services = providers.Container(ServiceModule, config=config)
