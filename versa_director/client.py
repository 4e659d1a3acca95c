from __future__ import annotations

import logging
from typing import List, Optional

from .addresses import AddressClient, AddressCollection
from .config import DirectorConfig, load_config
from .credentials import CredentialStore
from .inventory import ApplianceClient, ApplianceListing, OrganizationClient, OrganizationSummary
from .transport import TransportGateway

logger = logging.getLogger(__name__)


class DirectorClient:
    """Versa Director REST client.

    Construction authenticates: a usable cached token is reused, otherwise a
    new one is requested and an AuthError aborts construction.
    """

    def __init__(self, cfg: DirectorConfig, credentials: Optional[CredentialStore] = None):
        self._cfg = cfg
        self.credentials = credentials or CredentialStore(cfg)
        self.credentials.ensure_token()
        self.gateway = TransportGateway(cfg, self.credentials)
        self.addresses = AddressClient(self.gateway)
        self.organizations = OrganizationClient(self.gateway)
        self.appliances = ApplianceClient(self.gateway)
        logger.info("Created Director client for %s:%d user %s", cfg.host, cfg.port, cfg.username)

    @classmethod
    def from_env(cls) -> "DirectorClient":
        return cls(load_config())

    @property
    def host(self) -> str:
        return self._cfg.host

    # --- Addresses ---

    def fetch_addresses(self, device_name: str, organization_name: str) -> AddressCollection:
        return self.addresses.fetch_addresses(device_name, organization_name)

    def create_addresses(self, collection: AddressCollection) -> None:
        self.addresses.create_addresses(collection)

    def update_addresses(self, collection: AddressCollection) -> None:
        self.addresses.update_addresses(collection)

    def delete_addresses(self, collection: AddressCollection) -> None:
        self.addresses.delete_addresses(collection)

    # --- Inventory ---

    def list_organizations(self) -> List[OrganizationSummary]:
        return self.organizations.list_organizations()

    def list_appliances(self) -> ApplianceListing:
        return self.appliances.list_appliances()

    def close(self) -> None:
        self.gateway.close()

    def __enter__(self) -> "DirectorClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
