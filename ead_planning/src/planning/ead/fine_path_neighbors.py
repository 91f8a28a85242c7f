import math
from logging import Logger
from typing import List, Optional

from ead_planning.src.exceptions import UnknownIntersection
from ead_planning.src.planning.ead.ead_config import EadConfig
from ead_planning.src.planning.ead.neighbor_generator import NeighborGenerator
from ead_planning.src.planning.ead.neighbor_utils import NeighborUtils
from ead_planning.src.planning.ead.node import Node
from ead_planning.src.planning.ead.signal_phase_oracle import SignalPhaseOracle


class FinePathNeighbors(NeighborGenerator):
    """
    Calculates the viable neighbors of a node in the fine grid of the EAD search tree.
    Every expansion advances time by one fine time increment, changing speed by whole speed increments within the
    acceleration limits. A step that passes a stop bar is viable only if a single green phase covers the moment the
    bar is passed with a time buffer on both sides. A vehicle standing on a bar departs as soon as the signal is green,
    and a vehicle standing still may always keep waiting in place.
    """

    def __init__(self, logger: Logger, config: EadConfig):
        self._logger = logger
        self._config = config
        self._operating_speed = config.operating_speed
        self._oracle = None
        self._stop_bar_distances = ()
        self._stop_bar_units = ()

    def initialize(self, oracle: SignalPhaseOracle, operating_speed: Optional[float] = None) -> None:
        self._oracle = oracle
        self._stop_bar_distances = oracle.stop_bar_distances
        self._stop_bar_units = tuple(NeighborUtils.quantize_distance(distance)
                                     for distance in self._stop_bar_distances)
        if operating_speed is not None:
            self._operating_speed = min(operating_speed, self._config.speed_limit)
        self._logger.debug("FinePathNeighbors initialized with %d intersections, timeInc = %s, speedInc = %s",
                           oracle.num_intersections, self._config.fine_time_increment,
                           self._config.fine_speed_increment)

    @property
    def operating_speed(self) -> float:
        return self._operating_speed

    def neighbors(self, node: Node) -> List[Node]:
        cfg = self._config
        cur_time = node.time_as_double
        cur_loc = node.distance_as_double
        cur_speed = node.speed_as_double
        time_inc = cfg.fine_time_increment

        candidates = []
        for speed in self._reachable_speeds(cur_speed):
            if speed <= 0.0 and cur_speed <= 0.0:
                # standing still: wait in place for one time increment
                candidate = Node.from_real_units(cur_loc, cur_time + time_inc, 0.0)
            else:
                candidate = Node.from_real_units(cur_loc + 0.5 * (cur_speed + speed) * time_inc,
                                                 cur_time + time_inc, speed)

            if not NeighborUtils.is_feasible_successor(node, candidate, cfg.speed_limit):
                continue

            try:
                if not self._passes_stop_bars_on_green(node, candidate):
                    self._logger.debug("fine candidate %s passes a stop bar out of green", candidate)
                    continue
            except UnknownIntersection as e:
                self._logger.warning("FinePathNeighbors: stop bar lookup failed (%s), dropping candidate %s",
                                     e, candidate)
                continue

            candidates.append(candidate)

        neighbors = NeighborUtils.unique(candidates, cfg.max_neighbors_per_expansion)
        if not neighbors:
            self._logger.warning("FinePathNeighbors: node %s has no viable successor, passing the next stop bar out "
                                 "of green can't be avoided", node)
        else:
            self._logger.debug("fine node %s: returning %d neighbors.", node, len(neighbors))
        return neighbors

    def _reachable_speeds(self, cur_speed: float) -> List[float]:
        """
        Speeds reachable within one time increment: whole speed increments around the current speed, within the
        acceleration limits, clipped to [0, speed limit]. A full stop is reachable whenever the deceleration allows.
        :param cur_speed: [m/sec]
        :return: ascending distinct speeds
        """
        cfg = self._config
        max_delta_speed = cfg.max_accel * cfg.fine_time_increment
        max_steps = int(math.floor(max_delta_speed / cfg.fine_speed_increment + 1e-9))

        speeds = set()
        for step in range(-max_steps, max_steps + 1):
            speed = cur_speed + step * cfg.fine_speed_increment
            if 0.0 <= speed <= cfg.speed_limit:
                speeds.add(round(speed, 6))
        if cur_speed <= max_delta_speed:
            speeds.add(0.0)
        if abs(cfg.speed_limit - cur_speed) <= max_delta_speed:
            speeds.add(cfg.speed_limit)
        return sorted(speeds)

    def _passes_stop_bars_on_green(self, node: Node, candidate: Node) -> bool:
        """
        Checks every stop bar passed during the step from <node> to <candidate>. A bar is passed when it lies strictly
        inside the step, when the step ends on it with a positive speed, or when a vehicle standing on it departs.
        :param node: the vertex being expanded
        :param candidate: a successor of <node>
        :return: True if every passed stop bar is passed inside its green phase, time_buffer away from both ends
        """
        cur_speed = node.speed_as_double
        next_speed = candidate.speed_as_double
        duration = candidate.time_as_double - node.time_as_double

        for intersection_index, bar_units in enumerate(self._stop_bar_units):
            if bar_units < node.distance:
                continue
            if bar_units > candidate.distance:
                break

            if bar_units == node.distance:
                if candidate.distance == node.distance or cur_speed > 0.0:
                    # waiting on the bar, or the bar was passed upon arrival to <node>
                    continue
                # departing from a standstill at the bar
                if not NeighborUtils.is_green_at(self._oracle, intersection_index, node.time_as_double):
                    return False
                continue

            if bar_units == candidate.distance and next_speed <= 0.0:
                # coming to a stop on the bar
                continue

            dist_to_bar = self._stop_bar_distances[intersection_index] - node.distance_as_double
            pass_time = node.time_as_double + NeighborUtils.crossing_time(dist_to_bar, cur_speed, next_speed, duration)
            if not NeighborUtils.is_green_with_margin(self._oracle, intersection_index, pass_time,
                                                      self._config.time_buffer):
                return False

        return True
