from abc import ABCMeta, abstractmethod
from typing import Optional

from ead_planning.src.global_constants import EAD_TIME_COST_WEIGHT, EAD_SPEED_CHANGE_COST_WEIGHT, EAD_STOP_COST
from ead_planning.src.planning.ead.neighbor_utils import NeighborUtils
from ead_planning.src.planning.ead.node import Node


class CostModel(metaclass=ABCMeta):
    """
    Cost, heuristic and goal definition of an EAD search. The goal is a location (and optionally a speed) to be
    reached; heuristics never overestimate the remaining cost so that the first goal dequeued is optimal.
    """

    def __init__(self, goal_distance: float, speed_limit: float, goal_speed: Optional[float] = None,
                 speed_tolerance: float = 0.0):
        """
        :param goal_distance: [m] a node is a goal once it reached this downtrack distance
        :param speed_limit: [m/sec] upper bound on the speed, used to bound the remaining travel time
        :param goal_speed: [m/sec] speed a goal node must have, None if any speed is accepted
        :param speed_tolerance: [m/sec] accepted deviation from <goal_speed>
        """
        self._goal_distance = goal_distance
        self._goal_distance_units = NeighborUtils.quantize_distance(goal_distance)
        self._speed_limit = speed_limit
        self._goal_speed = goal_speed
        self._goal_speed_units = None if goal_speed is None else Node.from_real_units(0.0, 0.0, goal_speed).speed
        self._speed_tolerance_units = int(round(speed_tolerance * Node.M_PER_S_TO_SPEED_UNITS))

    @property
    def goal_distance(self) -> float:
        return self._goal_distance

    def is_goal(self, node: Node) -> bool:
        if node.distance < self._goal_distance_units:
            return False
        return self._goal_speed_units is None or \
            abs(node.speed - self._goal_speed_units) <= self._speed_tolerance_units

    def remaining_time_bound(self, node: Node) -> float:
        """
        :return: [sec] lower bound of the time it takes to get from <node> to the goal distance
        """
        return max(self._goal_distance - node.distance_as_double, 0.0) / self._speed_limit

    @abstractmethod
    def cost(self, parent: Node, child: Node) -> float:
        pass

    @abstractmethod
    def heuristic(self, node: Node) -> float:
        pass


class TravelTimeCostModel(CostModel):
    """Minimal travel time"""

    def cost(self, parent: Node, child: Node) -> float:
        return child.time_as_double - parent.time_as_double

    def heuristic(self, node: Node) -> float:
        return self.remaining_time_bound(node)


class EcoCostModel(CostModel):
    """
    Travel time plus penalties on speed changes and on full stops, which favors smooth profiles that pass the
    signals without stopping.
    """

    def __init__(self, goal_distance: float, speed_limit: float, goal_speed: Optional[float] = None,
                 speed_tolerance: float = 0.0, time_weight: float = EAD_TIME_COST_WEIGHT,
                 speed_change_weight: float = EAD_SPEED_CHANGE_COST_WEIGHT, stop_cost: float = EAD_STOP_COST):
        super().__init__(goal_distance, speed_limit, goal_speed, speed_tolerance)
        self._time_weight = time_weight
        self._speed_change_weight = speed_change_weight
        self._stop_cost = stop_cost

    def cost(self, parent: Node, child: Node) -> float:
        travel_time = child.time_as_double - parent.time_as_double
        speed_change = abs(child.speed_as_double - parent.speed_as_double)
        is_new_stop = child.speed == 0 and parent.speed > 0
        return self._time_weight * travel_time + self._speed_change_weight * speed_change + \
            (self._stop_cost if is_new_stop else 0.0)

    def heuristic(self, node: Node) -> float:
        return self._time_weight * self.remaining_time_bound(node)
