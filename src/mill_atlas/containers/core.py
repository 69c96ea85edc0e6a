# src/mill_atlas/containers/core.py
"""Core container: process-wide concerns driven by field-level configuration."""

from dependency_injector import containers, providers

from mill_atlas.observability.logging_config import setup_logging


class CoreContainer(containers.DeclarativeContainer):
    config = providers.Configuration()

    # Called once by `init_resources()` to configure structlog and stdlib logging.
    logging = providers.Resource(
        setup_logging,
        log_level=config.logging.level,
        log_format=config.logging.format,
        service=config.service_name,
    )
