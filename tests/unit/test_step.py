"""Unit tests for Step tree structure, validation and transitions"""

import pytest

from wizard_engine.core.flows import field_switch
from wizard_engine.core.step import Step
from wizard_engine.exceptions import (
    AmbiguousFlowError,
    ConfigurationError,
    FlowMatchError,
    StepAttachmentError,
    UnknownFlowError,
)
from wizard_engine.models.rules import FieldRules


@pytest.fixture
def branching(flows):
    """type -> personal | business, chosen by type.kind"""
    flows.add("account_kind", field_switch("type.kind", {"personal": "personal", "business": "business"}))
    personal = Step.make("personal", flows)
    business = Step.make("business", flows)
    root = Step.make("type", flows).set_flow("account_kind").set_children([personal, business])
    return root, personal, business


class TestStepConstruction:
    """Test step names and tree attachment"""

    @pytest.mark.parametrize("name", ["", "account.email"])
    def test_invalid_names(self, name):
        with pytest.raises(StepAttachmentError):
            Step.make(name)

    def test_children_get_parent(self):
        child = Step.make("profile")
        root = Step.make("account").set_children([child])

        assert child.parent is root
        assert root.children == [child]
        assert root.is_first() and not root.is_last()
        assert not child.is_first() and child.is_last()

    def test_replacing_children_detaches_old(self):
        old = Step.make("old")
        new = Step.make("new")
        root = Step.make("root").set_children([old])

        root.set_children([new])

        assert old.parent is None
        assert new.parent is root

    def test_child_of_another_parent_rejected(self):
        child = Step.make("child")
        Step.make("a").set_children([child])

        with pytest.raises(StepAttachmentError, match="already attached"):
            Step.make("b").set_children([child])

    def test_cycle_rejected(self):
        root = Step.make("root")
        child = Step.make("child")
        root.set_children([child])

        with pytest.raises(StepAttachmentError, match="cycle"):
            child.add_child(root)

    def test_same_child_twice_rejected(self):
        child = Step.make("child")

        with pytest.raises(StepAttachmentError):
            Step.make("root").set_children([child, child])

    def test_view_defaults_to_name(self):
        step = Step.make("account")

        assert step.view == "account"
        assert step.raw_view is None
        assert step.set_view("signup-account").view == "signup-account"

    def test_rules_are_coerced(self):
        step = Step.make("account").set_rules({"email": "required|string"})

        assert step.rules == {"email": FieldRules(required=True, type="string")}
        assert step.fields == ["email"]
        assert list(step.prefixed_rules()) == ["account.email"]

    def test_invalid_rules_name_the_field(self):
        with pytest.raises(ConfigurationError, match="account.age"):
            Step.make("account").set_rules({"age": "integer|min:x"})


class TestStepTraversal:
    """Test root lookup and tree iteration"""

    def test_pre_order(self, branching):
        root, personal, business = branching
        business.add_child(Step.make("vat", root.flows))

        assert [step.name for step in root.iter_steps()] == ["type", "personal", "business", "vat"]

    def test_get_root_and_find(self, branching):
        root, personal, business = branching

        assert business.get_root() is root
        assert root.find("business") is business
        assert root.find("missing") is None


class TestResolveNext:
    """Test successor selection"""

    def test_leaf_has_no_successor(self):
        assert Step.make("done").resolve_next({}) is None

    def test_single_child_without_flow(self):
        child = Step.make("profile")
        root = Step.make("account").set_children([child])

        assert root.resolve_next({}) is child

    def test_several_children_without_flow(self):
        root = Step.make("root").set_children([Step.make("a"), Step.make("b")])

        with pytest.raises(AmbiguousFlowError):
            root.resolve_next({})

    def test_flow_selects_matching_child(self, branching):
        root, personal, business = branching

        assert root.resolve_next({"type": {"kind": "business"}}) is business
        assert root.resolve_next({"type": {"kind": "personal"}}) is personal

    def test_flow_matching_nothing(self, branching):
        root, _, _ = branching

        with pytest.raises(FlowMatchError) as exc_info:
            root.resolve_next({"type": {"kind": "other"}})

        assert exc_info.value.matched == []

    def test_flow_matching_everything(self, flows):
        root = Step.make("root", flows).set_flow(lambda c, d, n: True, name="all").set_children(
            [Step.make("a", flows), Step.make("b", flows)]
        )

        with pytest.raises(FlowMatchError) as exc_info:
            root.resolve_next({})

        assert exc_info.value.matched == ["a", "b"]

    def test_flow_sees_flat_read_only_data(self, flows):
        seen = []

        def spy(current, data, candidate):
            seen.append(dict(data))
            with pytest.raises(TypeError):
                data["type.kind"] = "changed"
            return candidate.is_("only")

        root = Step.make("root", flows).set_flow(spy, name="spy").set_children([Step.make("only", flows)])
        root.resolve_next({"type": {"kind": "business"}})

        assert seen == [{"type.kind": "business"}]

    def test_unknown_flow_key(self, flows):
        root = Step.make("root", flows).set_flow("missing").set_children([Step.make("a", flows)])

        with pytest.raises(UnknownFlowError):
            root.resolve_next({})

    def test_lambda_without_name_rejected(self, flows):
        with pytest.raises(ConfigurationError):
            Step.make("root", flows).set_flow(lambda c, d, n: True)


class TestStepValidation:
    """Test validation and error propagation to the root"""

    def test_errors_are_prefixed_and_stored_on_root(self):
        child = Step.make("profile").set_rules({"name": "required|string"})
        root = Step.make("account").set_children([child])

        outcome = child.validate({"profile": {}})

        assert not outcome.ok
        assert outcome.errors.keys() == ["profile.name"]
        assert root.has_errors()
        assert root.errors.get("profile.name") == ["The name field is required"]
        assert child.errors is None

    def test_success_clears_root_errors(self):
        child = Step.make("profile").set_rules({"name": "required"})
        root = Step.make("account").set_children([child])
        child.validate({})

        outcome = child.validate({"profile": {"name": "Ann"}})

        assert outcome.ok
        assert not root.has_errors()

    def test_missing_section_is_empty(self):
        step = Step.make("account").set_rules({"email": "required"})

        assert not step.validate({"account": "not a mapping"}).ok

    def test_step_without_rules_is_valid(self):
        assert Step.make("intro").validate({})


class TestStepSerialization:

    def test_to_dict(self, branching):
        root, _, _ = branching
        root.set_label("Account type").set_rules({"kind": "required|in:personal,business"})

        data = root.to_dict()

        assert data["name"] == "type"
        assert data["label"] == "Account type"
        assert data["view"] is None
        assert data["flow"] == "account_kind"
        assert data["rules"] == {"kind": {"required": True, "choices": ["personal", "business"]}}
        assert [child["name"] for child in data["children"]] == ["personal", "business"]

    def test_restore_resolves_flow_eagerly(self, flows):
        with pytest.raises(UnknownFlowError):
            Step.restore("root", None, None, {}, "missing", [], flows=flows)

    def test_restore_attaches_children(self, flows):
        child = Step.restore("child", None, None, {}, None, [], flows=flows)
        root = Step.restore("root", "Root", "root-view", {}, None, [child], flows=flows)

        assert child.parent is root
        assert root.view == "root-view"
        assert root.flows is flows
