"""Tests for components, their stores, counters and experiential log."""

import pytest

from isolink.core.component import Component, EdgeStore, ResidueStore
from isolink.core.experience import ExperientialLog, INDIRECT_LINK_EVENT
from isolink.core.metrics import OutcomeMetrics, MetricsSnapshot
from isolink.core.types import (
    InvocationKind,
    MemberOf,
    Phase,
    SymbolicResidue,
    constant_activation,
)


class TestTypes:
    """Test value types."""

    def test_phase_parse(self):
        """Test phase parsing from names."""
        assert Phase.parse("Witness") is Phase.WITNESS
        assert Phase.parse(Phase.RESIDUE) is Phase.RESIDUE
        with pytest.raises(ValueError):
            Phase.parse("asleep")

    def test_kind_parse(self):
        """Test invocation kind parsing."""
        assert InvocationKind.parse("VIRTUAL") is InvocationKind.VIRTUAL
        with pytest.raises(ValueError):
            InvocationKind.parse("teleport")

    def test_residue_requires_anchor(self):
        """Test that empty anchors are rejected."""
        with pytest.raises(ValueError):
            SymbolicResidue(anchor="")

    def test_inert_residue(self):
        """Test a residue without activation."""
        residue = SymbolicResidue(anchor="render")
        assert residue.is_inert
        with pytest.raises(ValueError):
            residue.activate()

    def test_activation_receives_context(self):
        """Test that activation is evaluated against the residue's context."""
        residue = SymbolicResidue(anchor="render", context={"score": 0.7},
                                  activation=lambda ctx: ctx["score"])
        assert residue.activate() == 0.7

    def test_constant_activation(self):
        """Test constant activation ignores context."""
        activation = constant_activation(0.9)
        assert activation(None) == 0.9
        assert activation({"anything": 1}) == 0.9

    def test_residue_copy_is_independent(self):
        """Test that copies do not share the residue object."""
        original = SymbolicResidue(anchor="render", context="ctx",
                                   activation=constant_activation(0.8))
        copy = original.copy()

        assert copy is not original
        assert copy.anchor == "render"
        assert copy.context == "ctx"
        assert copy.activation is original.activation


class TestEdgeStore:
    """Test append-only edge sequences."""

    def test_symbol_id_is_position(self):
        """Test that symbol ids follow append order."""
        store = EdgeStore(owner_id=7)
        first = store.append(1, InvocationKind.DIRECT, 0.2)
        second = store.append(2, InvocationKind.VIRTUAL, 0.4)

        assert first.symbol_id == 0
        assert second.symbol_id == 1
        assert first.caller_id == 7
        assert [e.callee_id for e in store] == [1, 2]
        assert store.weights() == [0.2, 0.4]

    def test_weight_bounds(self):
        """Test that weights outside [0, 1] are rejected."""
        store = EdgeStore(owner_id=1)
        with pytest.raises(ValueError):
            store.append(2, InvocationKind.DIRECT, 1.5)
        with pytest.raises(ValueError):
            store.append(2, InvocationKind.DIRECT, -0.1)
        assert len(store) == 0


class TestResidueStore:
    """Test anchor storage."""

    def test_declaration_order(self):
        """Test anchors are kept in declaration order, duplicates included."""
        store = ResidueStore()
        store.add("a")
        store.add("b")
        store.add("a")

        assert store.anchors() == ["a", "b", "a"]
        assert len(list(store.matching("a"))) == 2

    def test_extend_copies(self):
        """Test copying residues from another store."""
        source = ResidueStore()
        source.add("x")
        source.add("y", activation=constant_activation(0.6))
        target = ResidueStore()
        target.add("z")

        assert target.extend_copies(list(source)) == 2
        assert target.anchors() == ["z", "x", "y"]
        assert target[1] is not source[0]


class TestComponent:
    """Test component state."""

    def test_fresh_component(self):
        """Test defaults of a newly created component."""
        component = Component(3, anchor="render")

        assert component.phase is Phase.DORMANT
        assert not component.canonical
        assert component.canonical_ref is None
        assert component.residues.anchors() == ["render"]
        assert len(component.edges) == 0

    def test_promote_is_self_referential(self):
        """Test that a representative refers to itself."""
        component = Component(3)
        component.promote()

        assert component.canonical
        assert component.canonical_ref == 3

    def test_join(self):
        """Test folding into another class."""
        representative = Component(1)
        representative.promote()
        member = Component(2)
        member.join(representative)

        assert not member.canonical
        assert member.state == MemberOf(1)
        assert member.canonical_ref == 1

    def test_release(self):
        """Test that release drops edges and residues."""
        component = Component(1, anchor="a")
        component.edges.append(2, InvocationKind.DIRECT, 0.5)
        component.release()

        assert component.destroyed
        assert len(component.edges) == 0
        assert len(component.residues) == 0


class TestOutcomeMetrics:
    """Test outcome counters."""

    def test_counters_start_at_zero(self):
        """Test initial state."""
        assert OutcomeMetrics().snapshot() == MetricsSnapshot()

    def test_recording(self):
        """Test each counter increments independently."""
        metrics = OutcomeMetrics()
        metrics.record_true_positive()
        metrics.record_true_positive()
        metrics.record_false_positive()
        metrics.record_true_negative()
        metrics.record_false_negative()

        snapshot = metrics.snapshot()
        assert snapshot.true_positive_link == 2
        assert snapshot.false_positive_link == 1
        assert snapshot.true_negative_skip == 1
        assert snapshot.false_negative_miss == 1
        assert snapshot.total == 5

    def test_snapshot_is_read_only(self):
        """Test that snapshots cannot be modified."""
        snapshot = OutcomeMetrics().snapshot()
        with pytest.raises(AttributeError):
            snapshot.true_positive_link = 10

    def test_counters_are_read_only(self):
        """Test that counters can only change through record methods."""
        metrics = OutcomeMetrics()
        with pytest.raises(AttributeError):
            metrics.true_positive_link = 10


class TestExperientialLog:
    """Test the bounded ring buffer."""

    def test_record(self):
        """Test recording a link event."""
        log = ExperientialLog(capacity=4, clock=lambda: 100.0)
        event = log.record(1, 2, 0.9)

        assert event.timestamp == 100.0
        assert event.source_id == 1
        assert event.target_id == 2
        assert event.score == 0.9
        assert event.event_type == INDIRECT_LINK_EVENT
        assert log.latest == event

    def test_drops_oldest_at_capacity(self):
        """Test eviction of the oldest entry when full."""
        log = ExperientialLog(capacity=3, clock=lambda: 1.0)
        for target in range(5):
            log.record(0, target, 0.6)

        assert len(log) == 3
        assert [e.target_id for e in log.events()] == [2, 3, 4]
        assert log.evictions == 2

    def test_timestamps_never_decrease(self):
        """Test that a clock stepping backwards does not reorder events."""
        ticks = iter([10.0, 5.0, 12.0])
        log = ExperientialLog(capacity=8, clock=lambda: next(ticks))
        for target in range(3):
            log.record(0, target, 0.7)

        assert [e.timestamp for e in log.events()] == [10.0, 10.0, 12.0]

    def test_invalid_capacity(self):
        """Test that capacity must be positive."""
        with pytest.raises(ValueError):
            ExperientialLog(capacity=0)
