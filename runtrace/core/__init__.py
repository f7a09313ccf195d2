# Core Package
from runtrace.core.config import TracingSettings, get_settings, is_tracing_enabled
from runtrace.core.logging import configure_logging

__all__ = ["TracingSettings", "get_settings", "is_tracing_enabled", "configure_logging"]
