from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError as ModelError, field_validator

from .errors import ConfigError, DecodeError, ValidationError
from .transport import TransportGateway, decode_json, join_path

logger = logging.getLogger(__name__)

DEVICES_PATH = "api/config/devices/device"
ORG_SERVICES_PATH = "config/orgs/org-services"
ADDRESSES_PATH = "objects/addresses"


class AddressObject(BaseModel):
    """A named address object. ``name`` is the natural key."""

    name: str
    fqdn: str = ""

    model_config = {"extra": "ignore"}

    @field_validator("fqdn", mode="before")
    @classmethod
    def none_is_empty(cls, v):
        return "" if v is None else v

    def to_wire(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name}
        if self.fqdn:
            data["fqdn"] = self.fqdn
        return data


class AddressCollection(BaseModel):
    """Ordered address objects scoped to one device/organization pair."""

    device_name: str
    organization_name: str
    items: List[AddressObject] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.items)

    def names(self) -> List[str]:
        return [a.name for a in self.items]

    def to_wire(self) -> Dict[str, Any]:
        return envelope(self.items)

    @classmethod
    def from_wire(cls, data: Any, device_name: str, organization_name: str) -> "AddressCollection":
        if not isinstance(data, dict):
            raise DecodeError(f"Expected a JSON object for addresses, got {type(data).__name__}")
        raw = data.get("address") or []
        if not isinstance(raw, list):
            raise DecodeError("Expected 'address' to be a list")
        try:
            items = [AddressObject.model_validate(a) for a in raw]
        except ModelError as e:
            raise DecodeError(f"Malformed address object: {e}") from e
        return cls(device_name=device_name, organization_name=organization_name, items=items)


def envelope(items: List[AddressObject]) -> Dict[str, Any]:
    return {"address": [a.to_wire() for a in items]}


class AddressClient:
    """Address objects under ``devices/device/{device}/.../objects/addresses``.

    Create posts the whole list in one request. The Director has no bulk
    update or delete, so those issue one request per item, in order, and stop
    at the first failure. Items already applied are not rolled back.
    """

    def __init__(self, gateway: TransportGateway):
        self._gw = gateway

    @staticmethod
    def _check_scope(device_name: str, organization_name: str) -> None:
        if not device_name:
            raise ConfigError("Device name is required for address operations")
        if not organization_name:
            raise ConfigError("Organization name is required for address operations")

    def collection_path(self, device_name: str, organization_name: str) -> str:
        return "/".join([
            DEVICES_PATH,
            join_path(device_name),
            ORG_SERVICES_PATH,
            join_path(organization_name),
            ADDRESSES_PATH,
        ])

    def item_path(self, device_name: str, organization_name: str, name: Optional[str] = None) -> str:
        path = f"{self.collection_path(device_name, organization_name)}/address"
        if name is not None:
            path += f"/{join_path(name)}"
        return path

    def _check_writable(self, collection: AddressCollection, operation: str) -> None:
        self._check_scope(collection.device_name, collection.organization_name)
        if not collection.items:
            raise ValidationError(f"Address {operation} failed as addresses count is 0")
        logger.debug(
            "Address %s for device %s org %s: %s",
            operation, collection.device_name, collection.organization_name, collection.names(),
        )

    def fetch_addresses(self, device_name: str, organization_name: str) -> AddressCollection:
        self._check_scope(device_name, organization_name)
        path = self.item_path(device_name, organization_name)
        body = self._gw.get(path)
        collection = AddressCollection.from_wire(
            decode_json(body, "addresses"), device_name, organization_name
        )
        logger.debug("Fetched %d addresses from %s", len(collection), path)
        return collection

    def create_addresses(self, collection: AddressCollection) -> None:
        self._check_writable(collection, "create")
        path = self.collection_path(collection.device_name, collection.organization_name)
        self._gw.post(path, collection.to_wire())
        logger.info("Created %d addresses on %s/%s", len(collection),
                    collection.device_name, collection.organization_name)

    def update_addresses(self, collection: AddressCollection) -> None:
        self._check_writable(collection, "update")
        for item in collection.items:
            path = self.item_path(collection.device_name, collection.organization_name, item.name)
            self._gw.put(path, envelope([item]))
            logger.debug("Updated address %s", item.name)
        logger.info("Updated %d addresses on %s/%s", len(collection),
                    collection.device_name, collection.organization_name)

    def delete_addresses(self, collection: AddressCollection) -> None:
        self._check_writable(collection, "delete")
        for item in collection.items:
            path = self.item_path(collection.device_name, collection.organization_name, item.name)
            self._gw.delete(path, envelope([item]))
            logger.debug("Deleted address %s", item.name)
        logger.info("Deleted %d addresses on %s/%s", len(collection),
                    collection.device_name, collection.organization_name)
