from __future__ import annotations

from .addresses import AddressCollection


def reconcile_read(desired: AddressCollection, remote: AddressCollection) -> AddressCollection:
    """Merge a fetched address list into existing state by ``name``.

    Remote entries overwrite a local entry with the same name in place, or are
    appended when no local entry matches. Local entries missing remotely are
    kept. The result is scoped like ``remote``.
    """
    merged = [a.model_copy() for a in desired.items]
    # First occurrence wins when local state repeats a name.
    index: dict = {}
    for i, a in enumerate(merged):
        index.setdefault(a.name, i)
    for obj in remote.items:
        pos = index.get(obj.name)
        if pos is None:
            index[obj.name] = len(merged)
            merged.append(obj.model_copy())
        else:
            merged[pos] = obj.model_copy()
    return AddressCollection(
        device_name=remote.device_name,
        organization_name=remote.organization_name,
        items=merged,
    )


def compute_write_set(desired: AddressCollection) -> AddressCollection:
    # No diffing against prior state: every write pushes the whole list.
    return desired.model_copy(deep=True)
