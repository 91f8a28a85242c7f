from abc import ABCMeta, abstractmethod
from typing import List, Optional

from ead_planning.src.planning.ead.node import Node
from ead_planning.src.planning.ead.signal_phase_oracle import SignalPhaseOracle


class NeighborGenerator(metaclass=ABCMeta):
    """
    Capability of expanding a vertex of the EAD search graph into its physically and signal feasible successors.
    Implementations differ only in the density of the successors they produce; the signal timing logic they share
    lives in NeighborUtils.
    """

    @abstractmethod
    def initialize(self, oracle: SignalPhaseOracle, operating_speed: Optional[float] = None) -> None:
        """
        Binds the generator to the signal phases of a single planning call. Must be called before neighbors().
        :param oracle: phase projections of the intersections downtrack
        :param operating_speed: [m/sec] target speed beyond the intersections. None keeps the configured one
        """
        pass

    @abstractmethod
    def neighbors(self, node: Node) -> List[Node]:
        """
        :param node: the vertex being expanded
        :return: successors of <node>, ordered deterministically and without duplicates
        """
        pass
