"""Request logging for the contact book.

Every request is written to the local structlog stream and, when a sink URL is
configured, forwarded fire-and-forget to an external log-collection endpoint.
"""

from contactbook.observability.forwarder import LogForwarder
from contactbook.observability.logging import configure_logging
from contactbook.observability.middleware import RequestLogMiddleware

__all__ = ["LogForwarder", "RequestLogMiddleware", "configure_logging"]
