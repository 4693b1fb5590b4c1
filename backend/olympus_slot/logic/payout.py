"""Prize lookup and loss-disguised-as-win classification."""
from olympus_slot.logic.models import PAYOUTS, Symbol, WinResolution


class PayoutCalculator:
    """
    Classifies wins against the spin cost.

    A win whose prize does not exceed the cost of the spin is a loss
    disguised as a win (LDW). The calculator is pure; the controller
    applies the balance changes.
    """

    def __init__(self, cost_per_spin: int, payouts: dict[Symbol, int] = PAYOUTS):
        self.cost_per_spin = cost_per_spin
        self.payouts = payouts

    def resolve_win(self, symbol: Symbol) -> WinResolution:
        prize = self.payouts[symbol]
        return WinResolution(symbol=symbol, prize=prize, is_ldw=prize <= self.cost_per_spin)

    def is_ldw(self, symbol: Symbol) -> bool:
        return self.resolve_win(symbol).is_ldw
