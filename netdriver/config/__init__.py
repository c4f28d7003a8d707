"""Runtime configuration of the netdriver application."""

from netdriver.config.logging import LoggingObserver, configure_logging

__all__ = ["LoggingObserver", "configure_logging"]
