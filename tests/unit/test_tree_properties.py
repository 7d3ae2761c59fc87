"""Property-based tests for step trees and wizard navigation"""

from hypothesis import given, strategies as st

from wizard_engine.core.codec import WizardCodec
from wizard_engine.core.flows import FlowRegistry
from wizard_engine.core.step import Step
from wizard_engine.core.wizard import Wizard


@st.composite
def parent_links(draw):
    """Parent index of every non-root node, always pointing to an earlier node"""
    size = draw(st.integers(min_value=1, max_value=25))
    return [draw(st.integers(min_value=0, max_value=index - 1)) for index in range(1, size)]


def build(links):
    """Build a tree where branching steps select the child named by ``<step>.next``"""
    flows = FlowRegistry()
    flows.add("by_next", lambda current, data, candidate: data.get(f"{current.name}.next") == candidate.name)

    steps = [Step.make("s0", flows)]
    for index, parent in enumerate(links, start=1):
        step = Step.make(f"s{index}", flows)
        steps[parent].add_child(step)
        steps.append(step)

    for step in steps:
        if len(step.children) > 1:
            step.set_flow("by_next")
    return steps, flows


class TestTreeProperties:

    @given(parent_links())
    def test_exactly_one_root(self, links):
        steps, _ = build(links)

        roots = [step for step in steps if step.is_first()]

        assert roots == [steps[0]]
        assert all(step.get_root() is steps[0] for step in steps)

    @given(parent_links())
    def test_pre_order_visits_every_step_once(self, links):
        steps, _ = build(links)

        visited = list(steps[0].iter_steps())

        assert visited[0] is steps[0]
        assert sorted(step.name for step in visited) == sorted(step.name for step in steps)

    @given(parent_links())
    def test_parents_precede_children(self, links):
        steps, _ = build(links)
        order = {step.name: position for position, step in enumerate(steps[0].iter_steps())}

        for step in steps[1:]:
            assert order[step.parent.name] < order[step.name]

    @given(parent_links())
    def test_last_means_leaf(self, links):
        steps, _ = build(links)

        for step in steps:
            assert step.is_last() == (not step.children)
            if len(step.children) <= 1:
                assert step.is_last() == (step.resolve_next({}) is None)

    @given(parent_links(), st.data())
    def test_walk_to_any_step(self, links, data):
        """Choosing a child at every branch reaches any chosen step"""
        steps, flows = build(links)
        target = data.draw(st.sampled_from(steps))

        path = []
        node = target
        while node.parent is not None:
            path.append((node.parent.name, node.name))
            node = node.parent

        wizard = Wizard("walk", root=steps[0], flows=flows)
        wizard.set_data({parent: {"next": child} for parent, child in path})

        while wizard.current_name != target.name and target is not steps[0]:
            assert wizard.next().moved

        assert wizard.get_current() is target

    @given(parent_links())
    def test_codec_round_trip(self, links):
        steps, flows = build(links)
        wizard = Wizard("walk", root=steps[0], flows=flows)
        codec = WizardCodec(flows=flows)

        loaded = codec.load(codec.dump(wizard))

        assert loaded.get_all_step_names() == wizard.get_all_step_names()
        assert loaded.root.to_dict() == wizard.root.to_dict()
