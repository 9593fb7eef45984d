"""
Per-component outcome counters.

Every resolution or equivalence decision is classified into one of four
quadrants. Counters only ever grow; they are bookkeeping for observability and
tuning and must never drive control flow.
"""

from dataclasses import dataclass, asdict
from typing import Dict


@dataclass(frozen=True)
class MetricsSnapshot:
    """Read-only view of a component's counters."""
    true_positive_link: int = 0
    false_positive_link: int = 0
    true_negative_skip: int = 0
    false_negative_miss: int = 0

    @property
    def total(self) -> int:
        return (self.true_positive_link + self.false_positive_link
                + self.true_negative_skip + self.false_negative_miss)

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


class OutcomeMetrics:
    """Mutable counters owned by a component."""

    __slots__ = ('_true_positive_link', '_false_positive_link',
                 '_true_negative_skip', '_false_negative_miss')

    def __init__(self):
        self._true_positive_link = 0
        self._false_positive_link = 0
        self._true_negative_skip = 0
        self._false_negative_miss = 0

    @property
    def true_positive_link(self) -> int:
        return self._true_positive_link

    @property
    def false_positive_link(self) -> int:
        return self._false_positive_link

    @property
    def true_negative_skip(self) -> int:
        return self._true_negative_skip

    @property
    def false_negative_miss(self) -> int:
        return self._false_negative_miss

    def record_true_positive(self) -> None:
        """A link was made, or a component was folded into this class."""
        self._true_positive_link += 1

    def record_false_positive(self) -> None:
        """A candidate looked equivalent but failed the weight check."""
        self._false_positive_link += 1

    def record_true_negative(self) -> None:
        """A resolution scan finished without a qualifying activation."""
        self._true_negative_skip += 1

    def record_false_negative(self) -> None:
        """An external validator reported a link the engine missed."""
        self._false_negative_miss += 1

    def snapshot(self) -> MetricsSnapshot:
        return MetricsSnapshot(
            true_positive_link=self._true_positive_link,
            false_positive_link=self._false_positive_link,
            true_negative_skip=self._true_negative_skip,
            false_negative_miss=self._false_negative_miss,
        )

    def __repr__(self) -> str:
        return (f"OutcomeMetrics(tp={self._true_positive_link}, "
                f"fp={self._false_positive_link}, "
                f"tn={self._true_negative_skip}, "
                f"fn={self._false_negative_miss})")
