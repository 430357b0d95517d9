"""hookhub transports."""

from hookhub.transports.base import Transport
from hookhub.transports.slack_transport import DryRunTransport, SlackTransport

__all__ = [
    "Transport",
    "SlackTransport",
    "DryRunTransport",
]
