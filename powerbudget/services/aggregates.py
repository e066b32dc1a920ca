from __future__ import annotations

from typing import Iterable

from lib.constants import DEFAULT_DOD
from lib.types import Battery, Load, OtherSource


class LoadAggregator:
    """Totals across all equipment loads.  An empty collection sums to zero."""

    def __init__(self, loads: Iterable[Load]) -> None:
        self.loads = list(loads)

    def __len__(self) -> int:
        return len(self.loads)

    @property
    def total_average_power(self) -> float:
        """Combined average draw (W)."""
        return sum(load.average_power for load in self.loads)

    @property
    def total_daily_energy(self) -> float:
        """Combined energy drawn per day (Wh)."""
        return sum(load.daily_energy for load in self.loads)


class BatteryBank:
    """Capacity totals across all battery banks in a project."""

    def __init__(self, batteries: Iterable[Battery]) -> None:
        self.batteries = list(batteries)

    @staticmethod
    def default_dod(chemistry: str) -> float:
        """Default depth of discharge (%) for *chemistry*.

        Raises:
            ValueError: If the chemistry is not one of the known types.
        """
        try:
            return DEFAULT_DOD[chemistry]
        except KeyError:
            raise ValueError(f"unknown battery chemistry {chemistry!r}") from None

    @property
    def total_capacity(self) -> float:
        """Nameplate energy (Wh)."""
        return sum(b.total_capacity for b in self.batteries)

    @property
    def usable_capacity(self) -> float:
        """Energy available within each bank's depth of discharge (Wh)."""
        return sum(b.usable_capacity for b in self.batteries)


def other_sources_daily_energy(sources: Iterable[OtherSource]) -> float:
    return sum(s.daily_energy for s in sources)
