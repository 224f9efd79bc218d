"""Protean domain bootstrap and schema management.

Every context runs its own Protean ``Domain`` but they all point at the same
database, configured from ``Settings.database_url``. ``init_domains()`` wires
the provider into each domain and initializes it once per process.
"""

import structlog
from protean.domain import Domain
from sqlalchemy import create_engine

from shared.config import get_settings

logger = structlog.get_logger(__name__)

_initialized: set[str] = set()


def database_config(database_url: str) -> dict:
    """Protean provider settings for a SQLAlchemy URL."""
    provider = "postgresql" if database_url.startswith("postgresql") else "sqlite"
    return {"provider": provider, "database_uri": database_url}


def all_domains() -> list[Domain]:
    from catalogue.domain import catalogue
    from identity.domain import identity
    from ordering.domain import ordering

    return [identity, catalogue, ordering]


def init_domain(domain: Domain, database_url: str | None = None) -> Domain:
    """Point the domain at the store database and initialize it (once)."""
    if domain.name in _initialized:
        return domain

    url = database_url or get_settings().database_url
    domain.config["databases"]["default"] = database_config(url)
    domain.config["command_processing"] = "sync"
    domain.config["event_processing"] = "sync"
    # Placement retries conflicts itself, from a fresh cart snapshot
    domain.config["server"]["version_retry"]["enabled"] = False
    domain.init()
    _initialized.add(domain.name)

    logger.debug("Domain initialized", domain=domain.name, provider=database_config(url)["provider"])
    return domain


def init_domains(database_url: str | None = None) -> list[Domain]:
    return [init_domain(domain, database_url) for domain in all_domains()]


def _register_models(domain: Domain, provider) -> None:
    # Touching the DAO registers the element's table on the provider's metadata
    for _, aggregate_record in domain.registry.aggregates.items():
        if aggregate_record.cls.meta_.provider == provider.name:
            domain.repository_for(aggregate_record.cls)._dao  # noqa: B018

    for _, entity_record in domain.registry.entities.items():
        if entity_record.cls.meta_.provider == provider.name:
            domain.repository_for(entity_record.cls)._dao  # noqa: B018


def setup_db(domain: Domain) -> None:
    """Create the domain's tables."""
    with domain.domain_context():
        for _, provider in domain.providers.items():
            if provider.conn_info["provider"] in ("sqlite", "postgresql"):
                _register_models(domain, provider)
                engine = create_engine(provider.conn_info["database_uri"])
                provider._metadata.create_all(engine)
                engine.dispose()


def drop_db(domain: Domain) -> None:
    """Drop the domain's tables."""
    with domain.domain_context():
        for _, provider in domain.providers.items():
            if provider.conn_info["provider"] in ("sqlite", "postgresql"):
                _register_models(domain, provider)
                engine = create_engine(provider.conn_info["database_uri"])
                provider._metadata.drop_all(engine)
                engine.dispose()


def reset_data(domain: Domain) -> None:
    """Delete every row the domain owns. Used between tests."""
    with domain.domain_context():
        for _, provider in domain.providers.items():
            provider._data_reset()
