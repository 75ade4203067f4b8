"""Schema helpers for SQL-backed providers of the Ratings domain."""

from protean.domain import Domain
from sqlalchemy import create_engine

from ratings.utils.logging import get_logger

logger = get_logger(__name__)

_SQL_PROVIDERS = ("sqlite", "postgresql")


def _sql_providers(domain: Domain):
    for name, provider in domain.providers.items():
        if provider.conn_info["provider"] in _SQL_PROVIDERS:
            yield name, provider


def _register_models(domain: Domain, provider_name: str) -> None:
    """Touch each repository DAO so its SQLAlchemy model joins the provider metadata."""
    registries = (
        domain.registry.aggregates,
        domain.registry.entities,
        domain.registry.projections,
    )
    for registry in registries:
        for _, record in registry.items():
            if record.cls.meta_.provider == provider_name:
                domain.repository_for(record.cls)._dao  # noqa: B018


def setup_db(domain: Domain) -> None:
    """Create reviewer, review, store, visit and read-model tables."""
    with domain.domain_context():
        for name, provider in _sql_providers(domain):
            _register_models(domain, name)
            engine = create_engine(provider.conn_info["database_uri"])
            provider._metadata.create_all(engine)
            logger.info("Schema created", provider=name)


def drop_db(domain: Domain) -> None:
    """Drop every table created by :func:`setup_db`."""
    with domain.domain_context():
        for name, provider in _sql_providers(domain):
            engine = create_engine(provider.conn_info["database_uri"])
            provider._metadata.drop_all(engine)
            logger.info("Schema dropped", provider=name)
