"""Unit tests for WizardStateService"""

import pytest

from wizard_engine.exceptions import SerializationError
from wizard_engine.services.session_state_service import WizardStateService
from wizard_engine.storage.session_store import InMemoryStore


@pytest.fixture
def store():
    return InMemoryStore()


class TestKeys:

    def test_without_prefix(self, store):
        assert WizardStateService(store).key("signup", "current") == "signup::current"

    def test_with_prefix(self, store):
        assert WizardStateService(store, prefix="tenant-1").key("signup", "data") == "tenant-1::signup::data"


class TestWizardStateService:
    """Test field persistence"""

    def test_current_round_trip(self, store):
        service = WizardStateService(store)

        service.save_current("signup", "profile")

        assert store.load("signup::current") == b'"profile"'
        assert service.load_current("signup") == "profile"

    def test_none_current_deletes_key(self, store):
        service = WizardStateService(store)
        service.save_current("signup", "profile")

        service.save_current("signup", None)

        assert not store.exists("signup::current")
        assert service.load_current("signup") is None

    def test_data_round_trip(self, store):
        service = WizardStateService(store)
        data = {"account": {"email": "a@example.com", "tags": ["x"]}}

        service.save_data("signup", data)

        assert service.load_data("signup") == data
        assert service.load_state("signup") == {"current": None, "data": data}

    def test_wizards_are_isolated(self, store):
        service = WizardStateService(store)
        service.save_current("signup", "profile")

        assert service.load_current("checkout") is None
        assert service.exists("signup")
        assert not service.exists("checkout")

    def test_forget(self, store):
        service = WizardStateService(store)
        service.save_current("signup", "profile")
        service.save_data("signup", {})

        service.forget("signup")

        assert store.keys() == []

    def test_corrupt_payload(self, store):
        store.save("signup::data", b"{broken")

        with pytest.raises(SerializationError, match="not valid JSON"):
            WizardStateService(store).load_data("signup")

    def test_wrong_types(self, store):
        service = WizardStateService(store)
        store.save("signup::current", b"42")
        store.save("signup::data", b"[1, 2]")

        with pytest.raises(SerializationError):
            service.load_current("signup")
        with pytest.raises(SerializationError):
            service.load_data("signup")
