"""FMailer domain templates provider.

Manages ``fmailer_domain_template`` resources and data sources through the
FMailer REST API.
"""

from .client import FMailerClient
from .diagnostics import Diagnostic, Severity
from .manifest import PROVIDER_MANIFEST
from .provider import DATA_SOURCES, RESOURCES, configure
from .state import ResourceData, ResourceState

__version__ = "0.1.0"

__all__ = [
    "DATA_SOURCES",
    "PROVIDER_MANIFEST",
    "RESOURCES",
    "Diagnostic",
    "FMailerClient",
    "ResourceData",
    "ResourceState",
    "Severity",
    "configure",
]
