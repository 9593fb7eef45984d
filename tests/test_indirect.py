"""Tests for indirect-link resolution."""

import pytest

from isolink.core.errors import ActivationError
from isolink.core.registry import Registry
from isolink.core.types import InvocationKind, Phase, constant_activation
from isolink.engine.indirect import (
    IndirectLinkResolver,
    add_indirect_edge,
    discover,
    witnessing,
)


@pytest.fixture
def registry():
    return Registry(clock=lambda: 1000.0)


class TestWitnessing:
    """Test the phase guard."""

    def test_restores_phase(self, registry):
        """Test that the phase is restored after the block."""
        component = registry.create(1)
        component.phase = Phase.TRANSFORM

        with witnessing(component) as original:
            assert component.phase is Phase.WITNESS
            assert original is Phase.TRANSFORM

        assert component.phase is Phase.TRANSFORM

    def test_restores_phase_on_exception(self, registry):
        """Test that the phase is restored when the block raises."""
        component = registry.create(1)

        with pytest.raises(RuntimeError):
            with witnessing(component):
                raise RuntimeError("boom")

        assert component.phase is Phase.DORMANT


class TestAddIndirectEdge:
    """Test edge creation."""

    def test_edge_and_event(self, registry):
        """Test that an Indirect edge and a log event are recorded."""
        source = registry.create(1)
        source.edges.append(1, InvocationKind.DIRECT, 0.3)
        target = registry.create(2)

        edge = add_indirect_edge(source, target, 0.8)

        assert edge.symbol_id == 1
        assert edge.caller_id == 1
        assert edge.callee_id == 2
        assert edge.kind is InvocationKind.INDIRECT
        assert edge.weight == 0.8

        event = source.experience.latest
        assert event.timestamp == 1000.0
        assert (event.source_id, event.target_id, event.score) == (1, 2, 0.8)
        assert event.event_type == "INDIRECT_LINK"
        assert len(target.experience) == 0


class TestIndirectLinkResolver:
    """Test resolution of symbolic targets."""

    def test_render_scenario(self, registry):
        """Test linking to an activatable anchor."""
        a = registry.create(1, "render")
        b = registry.create(2, "render")
        b.residues[0].activation = constant_activation(0.9)

        result = IndirectLinkResolver().resolve(a, "render", registry.all())

        assert result == 2
        assert len(a.edges) == 1
        assert a.edges[0].kind is InvocationKind.INDIRECT
        assert a.edges[0].callee_id == 2
        assert a.edges[0].weight == pytest.approx(0.9)
        assert a.metrics.true_positive_link == 1
        assert a.metrics.true_negative_skip == 0

    def test_nonexistent_anchor(self, registry):
        """Test that an unknown anchor yields no link and one skip."""
        a = registry.create(1, "render")

        result = IndirectLinkResolver().resolve(a, "nonexistent", registry.all())

        assert result is None
        assert a.metrics.true_negative_skip == 1
        assert len(a.edges) == 0

    def test_inert_anchor_never_links(self, registry):
        """Test that an anchor without activation is skipped."""
        a = registry.create(1)
        registry.create(2, "render")

        assert IndirectLinkResolver().resolve(a, "render", registry.all()) is None
        assert a.metrics.true_negative_skip == 1

    def test_threshold_is_strict(self, registry):
        """Test that a score of exactly 0.5 does not qualify."""
        a = registry.create(1)
        b = registry.create(2)
        b.residues.add("render", activation=constant_activation(0.5))

        assert IndirectLinkResolver().resolve(a, "render", registry.all()) is None
        assert len(a.edges) == 0

    def test_just_above_threshold(self, registry):
        """Test that 0.5000001 qualifies."""
        a = registry.create(1)
        b = registry.create(2)
        b.residues.add("render", activation=constant_activation(0.5000001))

        assert IndirectLinkResolver().resolve(a, "render", registry.all()) == 2
        assert a.edges[0].weight == 0.5000001

    def test_rejected_residue_continues_scan(self, registry):
        """Test that a low score moves on to later residues and components."""
        a = registry.create(1)
        low = registry.create(2)
        low.residues.add("render", activation=constant_activation(0.2))
        low.residues.add("render", activation=constant_activation(0.3))
        high = registry.create(3)
        high.residues.add("render", activation=constant_activation(0.6))

        assert IndirectLinkResolver().resolve(a, "render", registry.all()) == 3

    def test_first_qualifying_residue_wins(self, registry):
        """Test registry order decides between qualifying candidates."""
        a = registry.create(1)
        first = registry.create(2)
        first.residues.add("render", activation=constant_activation(0.6))
        second = registry.create(3)
        second.residues.add("render", activation=constant_activation(0.99))

        assert IndirectLinkResolver().resolve(a, "render", registry.all()) == 2

    def test_zero_is_a_valid_id(self, registry):
        """Test that linking to id 0 is distinct from no link."""
        a = registry.create(5)
        zero = registry.create(0)
        zero.residues.add("render", activation=constant_activation(0.9))

        result = IndirectLinkResolver().resolve(a, "render", registry.all())

        assert result == 0
        assert result is not None
        assert a.metrics.true_positive_link == 1

    def test_context_passed_to_activation(self, registry):
        """Test that the residue context reaches the activation."""
        seen = []

        def activation(context):
            seen.append(context)
            return 0.8

        a = registry.create(1)
        b = registry.create(2)
        b.residues.add("render", context={"frame": 7}, activation=activation)

        IndirectLinkResolver().resolve(a, "render", registry.all())

        assert seen == [{"frame": 7}]

    @pytest.mark.parametrize("score,expected", [(0.9, 2), (0.1, None)])
    def test_phase_restored(self, registry, score, expected):
        """Test the source phase is unchanged on success and failure."""
        a = registry.create(1)
        a.phase = Phase.RESIDUE
        b = registry.create(2)
        b.residues.add("render", activation=constant_activation(score))

        assert IndirectLinkResolver().resolve(a, "render", registry.all()) == expected
        assert a.phase is Phase.RESIDUE

    def test_witness_phase_visible_during_scan(self, registry):
        """Test that activations observe the source in the Witness phase."""
        a = registry.create(1)
        observed = []
        b = registry.create(2)
        b.residues.add("render", activation=lambda ctx: observed.append(a.phase) or 0.9)

        IndirectLinkResolver().resolve(a, "render", registry.all())

        assert observed == [Phase.WITNESS]
        assert a.phase is Phase.DORMANT

    def test_out_of_range_score(self, registry):
        """Test that a score above 1 is a fault and the phase is restored."""
        a = registry.create(1)
        b = registry.create(2)
        b.residues.add("render", activation=constant_activation(1.5))

        with pytest.raises(ActivationError) as exc_info:
            IndirectLinkResolver().resolve(a, "render", registry.all())

        assert exc_info.value.score == 1.5
        assert a.phase is Phase.DORMANT
        assert a.metrics.true_negative_skip == 0

    def test_activation_exception_propagates(self, registry):
        """Test that faults inside an activation propagate to the caller."""
        def broken(context):
            raise RuntimeError("activation failed")

        a = registry.create(1)
        b = registry.create(2)
        b.residues.add("render", activation=broken)

        with pytest.raises(RuntimeError):
            IndirectLinkResolver().resolve(a, "render", registry.all())
        assert a.phase is Phase.DORMANT

    def test_custom_threshold(self, registry):
        """Test a stricter threshold."""
        a = registry.create(1)
        b = registry.create(2)
        b.residues.add("render", activation=constant_activation(0.6))

        assert IndirectLinkResolver(threshold=0.7).resolve(a, "render", registry.all()) is None


class TestDiscover:
    """Test anchor discovery."""

    def test_discovers_inert_and_active(self, registry):
        """Test that discovery ignores activation."""
        registry.create(1, "render")
        b = registry.create(2)
        b.residues.add("render", activation=constant_activation(0.1))
        registry.create(3, "other")

        assert [c.id for c in discover("render", registry.all())] == [1, 2]
