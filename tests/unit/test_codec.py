"""Unit tests for WizardCodec serialization"""

import json

import pytest

from wizard_engine.core.codec import FORMAT_VERSION, WizardCodec, tree_hash
from wizard_engine.core.flows import field_switch
from wizard_engine.core.step import Step
from wizard_engine.core.wizard import Wizard
from wizard_engine.exceptions import SerializationError, StateDivergedError, UnknownFlowError
from wizard_engine.services.session_state_service import WizardStateService
from wizard_engine.storage.session_store import InMemoryStore


def build_tree(flows):
    flows.add("account_kind", field_switch("type.kind", {"personal": "personal", "business": "business"}))
    return Step.make("type", flows).set_label("Account type").set_rules({
        "kind": "required|in:personal,business",
    }).set_flow("account_kind").set_children([
        Step.make("personal", flows).set_rules({"age": "integer|min:18"}),
        Step.make("business", flows).set_view("business-form"),
    ])


@pytest.fixture
def wizard(flows):
    wizard = Wizard("signup", root=build_tree(flows), directory="steps")
    wizard.set_data({"type": {"kind": "business"}})
    wizard.next()
    return wizard


@pytest.fixture
def codec(flows):
    return WizardCodec(flows=flows)


class TestDump:
    """Test wizard serialization"""

    def test_dump_fields(self, codec, wizard):
        payload = codec.dump(wizard)

        assert payload["format"] == FORMAT_VERSION
        assert payload["name"] == "signup"
        assert payload["current"] == "business"
        assert payload["directory"] == "steps"
        assert payload["data"] == {"type": {"kind": "business"}}
        assert payload["tree_hash"] == tree_hash(wizard.root)
        assert payload["root"]["flow"] == "account_kind"

    def test_dumps_is_json(self, codec, wizard):
        assert json.loads(codec.dumps(wizard))["name"] == "signup"

    def test_tree_hash_changes_with_structure(self, flows):
        first = tree_hash(build_tree(flows))
        changed = build_tree(flows).set_label("Kind")

        assert first == tree_hash(build_tree(flows))
        assert first != tree_hash(changed)


class TestLoad:
    """Test wizard deserialization"""

    def test_round_trip(self, codec, wizard):
        loaded = codec.loads(codec.dumps(wizard))

        assert loaded.name == wizard.name
        assert loaded.current_name == "business"
        assert loaded.directory == "steps"
        assert loaded.get_data() == wizard.get_data()
        assert loaded.root.to_dict() == wizard.root.to_dict()
        assert loaded.find_by_name("personal").parent is loaded.root

    def test_loaded_wizard_navigates(self, codec, wizard):
        loaded = codec.load(codec.dump(wizard))
        loaded.go_to("type")
        loaded.set_data({"type": {"kind": "personal"}})

        assert loaded.next().step.name == "personal"

    def test_unknown_flow(self, wizard, flows):
        payload = WizardCodec(flows=flows).dump(wizard)
        flows.remove("account_kind")

        with pytest.raises(UnknownFlowError):
            WizardCodec(flows=flows).load(payload)

    def test_tree_hash_mismatch(self, codec, wizard):
        payload = codec.dump(wizard)
        payload["root"]["label"] = "Tampered"

        with pytest.raises(SerializationError, match="Tree hash mismatch"):
            codec.load(payload)

    def test_unknown_current(self, codec, wizard):
        payload = codec.dump(wizard)
        payload["current"] = "legacy"

        with pytest.raises(StateDivergedError):
            codec.load(payload)

    @pytest.mark.parametrize("field", ["format", "name", "current", "data", "root"])
    def test_missing_field(self, codec, wizard, field):
        payload = codec.dump(wizard)
        del payload[field]

        with pytest.raises(SerializationError, match=field):
            codec.load(payload)

    def test_unsupported_format(self, codec, wizard):
        payload = codec.dump(wizard)
        payload["format"] = 99

        with pytest.raises(SerializationError, match="Unsupported"):
            codec.load(payload)

    def test_invalid_step(self, codec, wizard):
        payload = codec.dump(wizard)
        del payload["tree_hash"]
        del payload["root"]["children"][1]["children"]

        with pytest.raises(SerializationError, match=r"root\.1"):
            codec.load(payload)

    @pytest.mark.parametrize("field,value", [
        ("name", 5),
        ("name", ""),
        ("name", "type.kind"),
        ("label", ["Account type"]),
        ("view", 3),
        ("flow", {"key": "account_kind"}),
        ("rules", ["required"]),
        ("children", 7),
        ("children", {"personal": {}}),
    ])
    def test_wrongly_typed_step_field(self, codec, wizard, field, value):
        payload = codec.dump(wizard)
        payload["root"][field] = value

        with pytest.raises(SerializationError, match="Invalid step at root"):
            codec.load(payload)

    def test_wrongly_typed_child_field(self, codec, wizard):
        payload = codec.dump(wizard)
        payload["root"]["children"][0]["name"] = None

        with pytest.raises(SerializationError, match=r"root\.0"):
            codec.load(payload)

    def test_invalid_rules(self, codec, wizard):
        payload = codec.dump(wizard)
        del payload["tree_hash"]
        payload["root"]["rules"]["kind"]["unknown"] = 1

        with pytest.raises(SerializationError, match="Invalid rules"):
            codec.load(payload)

    def test_invalid_json(self, codec):
        with pytest.raises(SerializationError, match="not valid JSON"):
            codec.loads("{not json")

    def test_non_mapping_payload(self, codec):
        with pytest.raises(SerializationError):
            codec.load(["signup"])


class TestRestoreInto:
    """Test applying a payload to a freshly built wizard"""

    def test_restore_into_fresh_wizard(self, codec, wizard, flows):
        state = WizardStateService(InMemoryStore())
        fresh = Wizard("signup", root=build_tree(flows), state=state)

        codec.restore_into(fresh, codec.dump(wizard))

        assert fresh.current_name == "business"
        assert fresh.get_data() == {"type": {"kind": "business"}}
        assert state.load_current("signup") == "business"

    def test_changed_tree_only_warns(self, codec, wizard, flows, caplog):
        fresh = Wizard("signup", root=build_tree(flows).set_label("Changed"))

        codec.restore_into(fresh, codec.dump(wizard))

        assert fresh.current_name == "business"
        assert "different step tree" in caplog.text

    def test_missing_step_in_live_tree(self, codec, wizard, flows):
        fresh = Wizard("signup", root=Step.make("type", flows))

        with pytest.raises(StateDivergedError):
            codec.restore_into(fresh, codec.dump(wizard))
