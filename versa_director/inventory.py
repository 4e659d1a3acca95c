from __future__ import annotations

import logging
from typing import Any, Dict, List, NamedTuple

from pydantic import Field, ValidationError as ModelError

from .errors import DecodeError
from .models import WireModel
from .transport import TransportGateway, decode_json

logger = logging.getLogger(__name__)

ORGANIZATIONS_PATH = "nextgen/organization"
APPLIANCES_PATH = "vnms/appliance/appliance"

# Only the first page is ever requested.
PAGE_LIMIT = 10
PAGE_OFFSET = 0


class OrganizationSummary(WireModel):
    id: int = 0
    uuid: str = ""
    name: str = ""
    subscription_plan: str = Field(default="", alias="subscriptionPlan")
    parent: str = ""


class ApplianceSummary(WireModel):
    uuid: str = ""
    name: str = ""
    services_status: str = Field(default="", alias="services-status")
    overall_status: str = Field(default="", alias="overall-status")
    ping_status: str = Field(default="", alias="ping-status")
    sync_status: str = Field(default="", alias="sync-status")
    owner_org: str = Field(default="", alias="ownerOrg")


class ApplianceListing(NamedTuple):
    total_count: int
    appliances: List[ApplianceSummary]


class OrganizationClient:
    def __init__(self, gateway: TransportGateway):
        self._gw = gateway

    def list_organizations(self) -> List[OrganizationSummary]:
        params: Dict[str, Any] = {"limit": PAGE_LIMIT, "offset": PAGE_OFFSET, "uuidOnly": "false"}
        data = decode_json(self._gw.get(ORGANIZATIONS_PATH, params=params), "organizations")
        if not isinstance(data, list):
            raise DecodeError(f"Expected a JSON list of organizations, got {type(data).__name__}")
        try:
            orgs = [OrganizationSummary.model_validate(o) for o in data]
        except ModelError as e:
            raise DecodeError(f"Malformed organization record: {e}") from e
        logger.debug("Listed %d organizations", len(orgs))
        return orgs


class ApplianceClient:
    def __init__(self, gateway: TransportGateway):
        self._gw = gateway

    def list_appliances(self) -> ApplianceListing:
        params: Dict[str, Any] = {"limit": PAGE_LIMIT, "offset": PAGE_OFFSET}
        data = decode_json(self._gw.get(APPLIANCES_PATH, params=params), "appliances")
        if not isinstance(data, dict):
            raise DecodeError(f"Expected a JSON object for appliances, got {type(data).__name__}")
        try:
            total = int(data.get("totalCount") or 0)
            appliances = [ApplianceSummary.model_validate(a) for a in data.get("appliances") or []]
        except (TypeError, ValueError) as e:
            raise DecodeError(f"Malformed appliance listing: {e}") from e
        logger.debug("Listed %d of %d appliances", len(appliances), total)
        return ApplianceListing(total_count=total, appliances=appliances)
