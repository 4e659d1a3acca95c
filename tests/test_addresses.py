"""Tests for address object endpoints."""
import pytest

from versa_director.addresses import AddressClient, AddressCollection, AddressObject
from versa_director.errors import ConfigError, DecodeError, TransportError, ValidationError

BASE = "https://director.example.net:9182/api/config/devices/device/Branch-1/config/orgs/org-services/ACME/objects/addresses"


def collection(*names, fqdn=""):
    return AddressCollection(
        device_name="Branch-1",
        organization_name="ACME",
        items=[AddressObject(name=n, fqdn=fqdn) for n in names],
    )


@pytest.fixture
def addresses(gateway):
    return AddressClient(gateway)


class TestWireFormat:
    def test_absent_and_empty_fqdn_decode_the_same(self):
        decoded = AddressCollection.from_wire(
            {"address": [{"name": "a"}, {"name": "b", "fqdn": ""}, {"name": "c", "fqdn": None}]},
            "Branch-1", "ACME",
        )
        assert [a.fqdn for a in decoded.items] == ["", "", ""]

    def test_encode_then_decode_keeps_fields(self):
        original = AddressCollection(
            device_name="Branch-1",
            organization_name="ACME",
            items=[AddressObject(name="a", fqdn="a.example.com"), AddressObject(name="b")],
        )
        decoded = AddressCollection.from_wire(original.to_wire(), "Branch-1", "ACME")
        assert decoded.items == original.items

    def test_empty_fqdn_omitted_on_wire(self):
        assert AddressObject(name="a").to_wire() == {"name": "a"}

    def test_missing_address_key_is_empty(self):
        assert len(AddressCollection.from_wire({}, "d", "o")) == 0

    def test_non_object_is_decode_error(self):
        with pytest.raises(DecodeError):
            AddressCollection.from_wire([], "d", "o")

    def test_nameless_entry_is_decode_error(self):
        with pytest.raises(DecodeError):
            AddressCollection.from_wire({"address": [{"fqdn": "x"}]}, "d", "o")


class TestFetch:
    def test_fetch(self, addresses, session, respond):
        session.request.return_value = respond(
            200, {"address": [{"name": "web", "fqdn": "www.example.com"}]}
        )
        result = addresses.fetch_addresses("Branch-1", "ACME")
        assert session.request.call_args.args == ("GET", f"{BASE}/address")
        assert result.device_name == "Branch-1"
        assert result.organization_name == "ACME"
        assert result.items == [AddressObject(name="web", fqdn="www.example.com")]

    def test_fetch_malformed_json(self, addresses, session, respond):
        session.request.return_value = respond(200, b"{")
        with pytest.raises(DecodeError):
            addresses.fetch_addresses("Branch-1", "ACME")

    def test_fetch_requires_scope(self, addresses, session):
        with pytest.raises(ConfigError):
            addresses.fetch_addresses("", "ACME")
        session.request.assert_not_called()


class TestWrites:
    @pytest.mark.parametrize("op", ["create_addresses", "update_addresses", "delete_addresses"])
    def test_empty_list_rejected_without_requests(self, addresses, session, op):
        with pytest.raises(ValidationError):
            getattr(addresses, op)(collection())
        session.request.assert_not_called()

    def test_create_posts_whole_list_once(self, addresses, session, respond):
        session.request.return_value = respond(201, b"")
        addresses.create_addresses(collection("a", "b", "c"))
        assert session.request.call_count == 1
        args, kwargs = session.request.call_args
        assert args == ("POST", BASE)
        assert kwargs["json"] == {"address": [{"name": "a"}, {"name": "b"}, {"name": "c"}]}

    def test_update_puts_each_item(self, addresses, session, respond):
        session.request.return_value = respond(204, b"")
        addresses.update_addresses(collection("a", "b", fqdn="x.example.com"))
        calls = session.request.call_args_list
        assert [c.args for c in calls] == [
            ("PUT", f"{BASE}/address/a"),
            ("PUT", f"{BASE}/address/b"),
        ]
        assert calls[1].kwargs["json"] == {"address": [{"name": "b", "fqdn": "x.example.com"}]}

    def test_update_stops_at_first_failure(self, addresses, session, respond):
        session.request.side_effect = [
            respond(200, b""),
            respond(404, b"", reason="Not Found"),
            respond(200, b""),
        ]
        with pytest.raises(TransportError) as exc:
            addresses.update_addresses(collection("a", "b", "c"))
        assert exc.value.is_not_found
        assert exc.value.url == f"{BASE}/address/b"
        assert session.request.call_count == 2

    def test_delete_each_item_in_order(self, addresses, session, respond):
        session.request.return_value = respond(200, b"")
        addresses.delete_addresses(collection("z", "a"))
        assert [c.args for c in session.request.call_args_list] == [
            ("DELETE", f"{BASE}/address/z"),
            ("DELETE", f"{BASE}/address/a"),
        ]

    def test_item_names_are_encoded(self, addresses):
        path = addresses.item_path("Branch 1", "ACME", "web/1")
        assert path.endswith("device/Branch%201/config/orgs/org-services/ACME/objects/addresses/address/web%2F1")
