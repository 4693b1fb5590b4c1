"""Map target symbols to reel stop positions."""
from typing import Sequence

from olympus_slot.logic.models import REEL_STRIPS, ReelStop, Symbol
from olympus_slot.logic.rng import ProductionRNG, RNGBase


def stop_offset(index: int, strip_length: int, symbol_height: float) -> float:
    """
    Scroll offset that centres strip[index] in the middle copy of a tripled strip.

    Adding strip_length keeps the stop inside the second copy whatever the
    index, so the backwards scroll never runs off either end.
    """
    return -(index + strip_length - 1) * symbol_height


class ReelMapper:
    """Chooses a stop index per reel for a set of target symbols."""

    def __init__(
        self,
        rng: RNGBase | None = None,
        strips: Sequence[Sequence[Symbol]] = REEL_STRIPS,
    ):
        self.rng = rng or ProductionRNG()
        self.strips = strips

    def find_stop_index(self, strip: Sequence[Symbol], target: Symbol) -> int:
        """Uniformly pick one of the indices where target sits on the strip."""
        candidates = [i for i, symbol in enumerate(strip) if symbol == target]
        if not candidates:
            raise ValueError(f"symbol {target.value} does not appear on strip")
        return self.rng.choice(candidates)

    def map_targets(
        self, targets: Sequence[Symbol], symbol_height: float
    ) -> list[ReelStop]:
        """Resolve one stop per reel, in reel order."""
        if len(targets) != len(self.strips):
            raise ValueError(
                f"expected {len(self.strips)} targets, got {len(targets)}"
            )
        stops: list[ReelStop] = []
        for reel, (strip, target) in enumerate(zip(self.strips, targets)):
            index = self.find_stop_index(strip, target)
            stops.append(
                ReelStop(
                    reel=reel,
                    symbol=target,
                    index=index,
                    offset=stop_offset(index, len(strip), symbol_height),
                )
            )
        return stops
