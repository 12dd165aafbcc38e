"""Service configuration for the exchange."""

import os
from dataclasses import dataclass

_TRUTHY = ("true", "1", "yes")


@dataclass(frozen=True)
class ExchangeConfig:
    """Runtime settings for the exchange service.

    Protocol parameters (the 1% fee, share token metadata) are constants in
    exchange.constants and are deliberately not part of this object.

    Attributes:
        host: Interface the HTTP service binds to (default: 0.0.0.0)
        port: Port the HTTP service listens on (default: 8000)
        debug: Enable uvicorn reload mode (default: False)
        log_level: Minimum log level name (default: INFO)
        log_json: Render logs as JSON lines instead of console output
    """

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    log_level: str = "INFO"
    log_json: bool = False

    @classmethod
    def from_env(cls) -> "ExchangeConfig":
        """Load configuration from EXCHANGE_* environment variables.

        - EXCHANGE_HOST: Host to bind to
        - EXCHANGE_PORT: Port to bind to
        - EXCHANGE_DEBUG: Enable debug/reload mode
        - EXCHANGE_LOG_LEVEL: DEBUG, INFO, WARNING or ERROR
        - EXCHANGE_LOG_JSON: Emit JSON logs
        """
        return cls(
            host=os.environ.get("EXCHANGE_HOST", cls.host),
            port=int(os.environ.get("EXCHANGE_PORT", str(cls.port))),
            debug=os.environ.get("EXCHANGE_DEBUG", "false").lower() in _TRUTHY,
            log_level=os.environ.get("EXCHANGE_LOG_LEVEL", cls.log_level).upper(),
            log_json=os.environ.get("EXCHANGE_LOG_JSON", "false").lower() in _TRUTHY,
        )


# Default configuration instance
DEFAULT_CONFIG = ExchangeConfig()
