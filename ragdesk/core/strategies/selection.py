from abc import ABC, abstractmethod
from typing import Protocol, Sequence, TypeVar


class Scored(Protocol):
    score: float


S = TypeVar("S", bound=Scored)


class SelectionPolicy(ABC):
    """Base class for picking snippets out of per-document groups."""

    @abstractmethod
    def select(self, groups: Sequence[Sequence[S]], max_count: int) -> list[S]:
        """Pick up to max_count items.

        Args:
            groups: Per-document candidates, each already capped and
                sorted by score descending.
            max_count: Upper bound on returned items.
        """
        ...


class DiversitySelection(SelectionPolicy):
    """Round-robin across documents, one item per document per round."""

    def select(self, groups: Sequence[Sequence[S]], max_count: int) -> list[S]:
        selected: list[S] = []
        depth = max((len(g) for g in groups), default=0)

        for round_idx in range(depth):
            for group in groups:
                if len(selected) >= max_count:
                    return selected
                if round_idx < len(group):
                    selected.append(group[round_idx])

        return selected


class TopScoreSelection(SelectionPolicy):
    """Flatten capped groups and take the global top by score."""

    def select(self, groups: Sequence[Sequence[S]], max_count: int) -> list[S]:
        flat = [item for group in groups for item in group]
        flat.sort(key=lambda x: x.score, reverse=True)
        return flat[:max_count]
