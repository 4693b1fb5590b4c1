"""Random sources shared by the outcome engine and the reel mapper."""
import secrets
from abc import ABC, abstractmethod
from typing import Sequence, TypeVar

T = TypeVar("T")


class RNGBase(ABC):
    """
    Abstract RNG interface.

    Only random() and randint() touch the underlying source; choice() and
    shuffled() are built on randint() so every implementation draws the
    same way.
    """

    @abstractmethod
    def random(self) -> float:
        """Return random float in [0, 1)."""
        pass

    @abstractmethod
    def randint(self, a: int, b: int) -> int:
        """Return random int in [a, b] inclusive."""
        pass

    def choice(self, items: Sequence[T]) -> T:
        """Pick one element uniformly."""
        if not items:
            raise IndexError("cannot choose from an empty sequence")
        return items[self.randint(0, len(items) - 1)]

    def shuffled(self, items: Sequence[T]) -> list[T]:
        """Return a uniformly permuted copy (Fisher-Yates)."""
        out = list(items)
        for i in range(len(out) - 1, 0, -1):
            j = self.randint(0, i)
            out[i], out[j] = out[j], out[i]
        return out


class ProductionRNG(RNGBase):
    """Unseeded source for live sessions."""

    def random(self) -> float:
        return secrets.randbelow(2**32) / (2**32)

    def randint(self, a: int, b: int) -> int:
        return secrets.randbelow(b - a + 1) + a


class SeededRNG(RNGBase):
    """
    Deterministic source for tests, demos and simulation.

    Fully controlled by seed.
    """

    def __init__(self, seed: int):
        import random

        self._rng = random.Random(seed)
        self.seed = seed

    def random(self) -> float:
        return self._rng.random()

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)
