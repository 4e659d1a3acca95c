"""
versa-director-client: manage Versa Director objects from a declarative engine.

This package provides an OAuth2-authenticated REST client for the Versa Director
management API covering device address objects, organizations and appliances,
plus the lifecycle handlers that reconcile declarative state with the Director.
"""

from .client import DirectorClient
from .config import DirectorConfig, load_config, resolve_scope
from .credentials import CredentialStore, Token
from .transport import TransportGateway
from .addresses import AddressClient, AddressCollection, AddressObject
from .inventory import (
    ApplianceClient,
    ApplianceListing,
    ApplianceSummary,
    OrganizationClient,
    OrganizationSummary,
)
from .reconcile import compute_write_set, reconcile_read
from .resources import (
    AddressesDataSource,
    AddressesResource,
    AppliancesDataSource,
    OrganizationsDataSource,
)
from .errors import (
    AuthError,
    ConfigError,
    DecodeError,
    DirectorError,
    TransportError,
    ValidationError,
)

__version__ = "0.1.0"

__all__ = [
    # Client
    "DirectorClient",
    "CredentialStore",
    "Token",
    "TransportGateway",
    # Config
    "DirectorConfig",
    "load_config",
    "resolve_scope",
    # Addresses
    "AddressClient",
    "AddressCollection",
    "AddressObject",
    "reconcile_read",
    "compute_write_set",
    # Inventory
    "OrganizationClient",
    "OrganizationSummary",
    "ApplianceClient",
    "ApplianceListing",
    "ApplianceSummary",
    # Lifecycle
    "AddressesResource",
    "AddressesDataSource",
    "OrganizationsDataSource",
    "AppliancesDataSource",
    # Errors
    "DirectorError",
    "ConfigError",
    "AuthError",
    "TransportError",
    "ValidationError",
    "DecodeError",
]
