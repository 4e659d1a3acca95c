"""Lifecycle handlers for declarative resources and data sources.

States are plain dicts shaped like the declarative schema::

    {"id": "1", "device_name": ..., "organization_name": ...,
     "last_updated": ..., "address": [{"name": ..., "fqdn": ...}, ...]}

Scope values missing from a state fall back to the ``VERSA_VOS_*``
environment variables before any request is made.
"""
from __future__ import annotations

import functools
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as ModelError

from .addresses import AddressCollection, AddressObject
from .client import DirectorClient
from .config import resolve_scope
from .errors import DirectorError, ValidationError
from .reconcile import compute_write_set, reconcile_read

logger = logging.getLogger(__name__)

RESOURCE_ID = "1"
RFC850 = "%A, %d-%b-%y %H:%M:%S %Z"


def _now() -> str:
    return datetime.now(timezone.utc).strftime(RFC850)


def _lifecycle(kind: str, operation: str):
    def deco(fn):
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            logger.debug("%s %s request received", operation.upper(), kind)
            start = time.perf_counter()
            ok = False
            try:
                result = fn(*args, **kwargs)
                ok = True
                return result
            except DirectorError as e:
                logger.error("%s %s failed: %s", operation.upper(), kind, e)
                raise
            finally:
                dur = (time.perf_counter() - start) * 1000.0
                logger.info("%s %s %s in %.1f ms", operation.upper(), kind,
                            "completed" if ok else "failed", dur)
        return wrapper
    return deco


def _collection(state: Dict[str, Any], device: str, org: str) -> AddressCollection:
    try:
        items = [AddressObject.model_validate(a) for a in state.get("address") or []]
    except ModelError as e:
        raise ValidationError(f"Invalid address entry: {e}") from e
    return AddressCollection(device_name=device, organization_name=org, items=items)


def _addresses_state(collection: AddressCollection) -> Dict[str, Any]:
    return {
        "id": RESOURCE_ID,
        "device_name": collection.device_name,
        "organization_name": collection.organization_name,
        "last_updated": _now(),
        "address": [a.model_dump() for a in collection.items],
    }


def _touch(state: Dict[str, Any]) -> None:
    state["id"] = RESOURCE_ID
    state["last_updated"] = _now()


class AddressesResource:
    """Managed address list for one device/organization pair."""

    kind = "addresses"

    def __init__(self, client: DirectorClient):
        self._client = client

    @_lifecycle(kind, "create")
    def create(self, plan: Dict[str, Any]) -> Dict[str, Any]:
        device, org = resolve_scope(plan.get("device_name"), plan.get("organization_name"))
        desired = compute_write_set(_collection(plan, device, org))
        self._client.create_addresses(desired)
        return _addresses_state(desired)

    @_lifecycle(kind, "read")
    def read(self, state: Dict[str, Any]) -> Dict[str, Any]:
        # Bookkeeping is refreshed even when the fetch below fails.
        _touch(state)
        device, org = resolve_scope(state.get("device_name"), state.get("organization_name"))
        remote = self._client.fetch_addresses(device, org)
        merged = reconcile_read(_collection(state, device, org), remote)
        return _addresses_state(merged)

    @_lifecycle(kind, "update")
    def update(self, plan: Dict[str, Any]) -> Dict[str, Any]:
        device, org = resolve_scope(plan.get("device_name"), plan.get("organization_name"))
        desired = compute_write_set(_collection(plan, device, org))
        self._client.update_addresses(desired)
        return _addresses_state(desired)

    @_lifecycle(kind, "delete")
    def delete(self, state: Dict[str, Any]) -> None:
        device, org = resolve_scope(state.get("device_name"), state.get("organization_name"))
        self._client.delete_addresses(_collection(state, device, org))


class AddressesDataSource:
    kind = "addresses data source"

    def __init__(self, client: DirectorClient):
        self._client = client

    @_lifecycle(kind, "read")
    def read(self, config: Dict[str, Any]) -> Dict[str, Any]:
        device, org = resolve_scope(config.get("device_name"), config.get("organization_name"))
        return _addresses_state(self._client.fetch_addresses(device, org))


class OrganizationsDataSource:
    kind = "organizations data source"

    def __init__(self, client: DirectorClient):
        self._client = client

    @_lifecycle(kind, "read")
    def read(self, config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        orgs: List[Dict[str, Any]] = [
            {"id": o.id, "uuid": o.uuid, "name": o.name, "subscription_plan": o.subscription_plan}
            for o in self._client.list_organizations()
        ]
        return {"organizations": orgs}


class AppliancesDataSource:
    kind = "appliances data source"

    def __init__(self, client: DirectorClient):
        self._client = client

    @_lifecycle(kind, "read")
    def read(self, config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        listing = self._client.list_appliances()
        return {
            "total_count": listing.total_count,
            "appliances": [
                {
                    "uuid": a.uuid,
                    "name": a.name,
                    "services_status": a.services_status,
                    "overall_status": a.overall_status,
                }
                for a in listing.appliances
            ],
        }
