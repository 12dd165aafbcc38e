"""structlog configuration for the exchange service."""

from __future__ import annotations

import logging

import structlog

from exchange.config import ExchangeConfig


def configure_logging(config: ExchangeConfig) -> None:
    """Configure structlog processors and level from the service config.

    Unknown level names fall back to INFO.
    """
    log_level = logging.getLevelName(config.log_level)
    if not isinstance(log_level, int):
        log_level = logging.INFO

    renderer = (
        structlog.processors.JSONRenderer() if config.log_json else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )
