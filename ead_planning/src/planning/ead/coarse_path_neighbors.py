import math
from logging import Logger
from typing import List, Optional

from ead_planning.src.exceptions import UnknownIntersection
from ead_planning.src.global_constants import TYPICAL_INTERSECTION_WIDTH, EAD_NEGLIGIBLE_SPEED_CHANGE, EPS
from ead_planning.src.messages.intersection_message import SignalPhase
from ead_planning.src.planning.ead.ead_config import EadConfig
from ead_planning.src.planning.ead.neighbor_generator import NeighborGenerator
from ead_planning.src.planning.ead.neighbor_utils import NeighborUtils
from ead_planning.src.planning.ead.node import Node
from ead_planning.src.planning.ead.signal_phase_oracle import SignalPhaseOracle


class CoarsePathNeighbors(NeighborGenerator):
    """
    Calculates the viable neighbors of a node in the coarse grid of the EAD search tree.
    Nodes are only placed at the stop bars of known signals, plus one node downtrack of the farthest signal where
    operating speed is regained, which represents the end goal.

    A note on nomenclature: a point on the planned line is a location (variables named *_loc), the delta between two
    locations is a distance (variables named *dist*).
    """

    def __init__(self, logger: Logger, config: EadConfig):
        self._logger = logger
        self._config = config
        self._operating_speed = config.operating_speed
        self._oracle = None
        self._stop_bar_distances = ()

    def initialize(self, oracle: SignalPhaseOracle, operating_speed: Optional[float] = None) -> None:
        self._oracle = oracle
        self._stop_bar_distances = oracle.stop_bar_distances
        if operating_speed is not None:
            self._operating_speed = min(operating_speed, self._config.speed_limit)
        self._logger.debug("CoarsePathNeighbors initialized with %d intersections, timeInc = %s, operating speed = %s",
                           oracle.num_intersections, self._config.coarse_time_increment, self._operating_speed)

    @property
    def operating_speed(self) -> float:
        return self._operating_speed

    def neighbors(self, node: Node) -> List[Node]:
        self._logger.debug("Entering coarse node %s", node)

        hold_node = self._hold_at_stop_bar(node)
        if hold_node is not None:
            self._logger.debug("Waiting at the stop bar for green: %s", hold_node)
            return [hold_node]

        intersection_index = NeighborUtils.next_intersection_index(self._stop_bar_distances, node)
        neighbors = None
        if intersection_index is not None:
            try:
                neighbors = self._intersection_neighbors(node, intersection_index)
            except UnknownIntersection as e:
                self._logger.warning("CoarsePathNeighbors: intersection %d is not in the snapshot (%s), treating "
                                     "node %s as past the last intersection", intersection_index, e, node)

        if neighbors is None:
            neighbors = [self._terminal_neighbor(node)]

        neighbors = NeighborUtils.unique(neighbors, self._config.max_neighbors_per_expansion)
        self._logger.debug("returning %d neighbors.", len(neighbors))
        return neighbors

    def _hold_at_stop_bar(self, node: Node) -> Optional[Node]:
        """
        A vehicle standing on a stop bar while its signal is red or yellow departs no earlier than the onset of the
        following green. Expanding such a node yields a single node waiting in place until that onset.
        :param node: the vertex being expanded
        :return: the waiting node, or None if <node> is free to depart
        """
        if node.speed > 0:
            return None

        for intersection_index, stop_bar_distance in enumerate(self._stop_bar_distances):
            if NeighborUtils.quantize_distance(stop_bar_distance) != node.distance:
                continue
            if self._oracle.phase_at(intersection_index, node.time_as_double).phase not in \
                    (SignalPhase.RED, SignalPhase.YELLOW):
                return None
            green_onset = self._oracle.next_green_onset(intersection_index, node.time_as_double)
            # rounded up so that the waiting node never precedes the onset
            onset_units = math.ceil(green_onset * Node.S_TO_TIME_UNITS - EPS)
            hold_time = max(onset_units / Node.S_TO_TIME_UNITS, node.time_as_double + Node.time_resolution())
            return Node.from_real_units(node.distance_as_double, hold_time, 0.0)

        return None

    def _intersection_neighbors(self, node: Node, intersection_index: int) -> List[Node]:
        """
        Successors at the stop bar of the next intersection: a fan of arrivals sliced from the green phase met at
        kinematically limited speed, a fan of arrivals sliced from the following green phase, or a single
        stop-and-wait node when the following green can't be met above crawling speed.
        :param node: the vertex being expanded
        :param intersection_index: index of the next intersection downtrack of <node>
        :return: candidate successors (not yet de-duplicated)
        """
        cfg = self._config
        cur_time = node.time_as_double
        cur_loc = node.distance_as_double
        cur_speed = node.speed_as_double

        node_loc = self._oracle.stop_bar_distance(intersection_index)
        dist_to_next = node_loc - cur_loc
        lag_dist = cfg.lag_time * cur_speed

        time_at_next, speed_at_next = self._arrival_at_next(cur_time, cur_speed, dist_to_next, lag_dist)

        candidates = []

        # if that intersection's signal will be green when we arrive then slice up the remainder of that green phase
        state = self._oracle.phase_at(intersection_index, time_at_next)
        if state.phase == SignalPhase.GREEN:
            green_expiration = time_at_next + state.time_remaining - cfg.time_buffer
            node_time = time_at_next
            node_speed = speed_at_next
            while node_speed >= cfg.crawling_speed and node_time <= green_expiration:
                if node_speed <= cfg.speed_limit:
                    candidates.append(Node.from_real_units(node_loc, node_time, node_speed))
                    self._logger.debug("current green: time = %s speed = %s loc = %s", node_time, node_speed, node_loc)
                node_time += cfg.coarse_time_increment
                node_speed = NeighborUtils.chord_speed(dist_to_next, node_time - cur_time, cur_speed)

        # find the following green phase and the speed reduction needed to get there
        green_onset = self._oracle.next_green_onset(intersection_index, time_at_next)
        time_of_next_green = green_onset + cfg.time_buffer
        next_green_expiration = time_of_next_green + \
            self._oracle.phase_duration(intersection_index, SignalPhase.GREEN) - cfg.time_buffer
        self._logger.debug("timeOfNextGreen = %s greenExpiration = %s", time_of_next_green, next_green_expiration)

        # too close to adjust speed in time: either the current green handles it or the plan upstream has already
        # failed, in both cases no speed adjustment toward the following green exists
        if dist_to_next < lag_dist or (time_of_next_green - cur_time) <= cfg.lag_time:
            node_speed = 0.0
        else:
            calc_speed = NeighborUtils.chord_speed(dist_to_next - lag_dist,
                                                   time_of_next_green - cur_time - cfg.lag_time, cur_speed)
            node_speed = max(min(calc_speed, cfg.speed_limit), 0.0)

        next_green_candidates = []
        node_time = time_of_next_green
        while node_speed >= cfg.crawling_speed and node_time <= next_green_expiration:
            if node_speed <= cfg.speed_limit:
                next_green_candidates.append(Node.from_real_units(node_loc, node_time, node_speed))
                self._logger.debug("following green: time = %s speed = %s loc = %s", node_time, node_speed, node_loc)
            node_time += cfg.coarse_time_increment
            node_speed = NeighborUtils.chord_speed(dist_to_next, node_time - cur_time, cur_speed)

        candidates = [candidate for candidate in candidates + next_green_candidates
                      if NeighborUtils.is_feasible_successor(node, candidate, cfg.speed_limit)]

        # the following green can't be met above crawling speed: come to a stop at the stop bar while red expires
        if not next_green_candidates:
            stop_time = max(green_onset - cfg.time_buffer, cur_time + cfg.coarse_time_increment)
            stop_node = Node.from_real_units(node_loc, stop_time, 0.0)
            candidates.append(stop_node)
            self._logger.debug("Need to stop at red: %s", stop_node)

        return candidates

    def _arrival_at_next(self, cur_time: float, cur_speed: float, dist_to_next: float, lag_dist: float):
        """
        Kinematically limited arrival at the next stop bar, changing speed toward operating speed at max acceleration
        after the response lag (the lag is ignored for negligible speed changes).
        :return: ([sec] plan time of arrival, [m/sec] speed at arrival)
        """
        cfg = self._config
        oper_speed = self._operating_speed

        delta_speed = abs(oper_speed - cur_speed)
        time_to_oper_speed, dist_to_oper_speed = \
            NeighborUtils.time_and_distance_to_speed(cur_speed, oper_speed, cfg.max_accel)

        time_at_next = cur_time
        applied_lag_dist = 0.0
        if delta_speed > EAD_NEGLIGIBLE_SPEED_CHANGE:
            applied_lag_dist = lag_dist
            dist_to_oper_speed += lag_dist

            # the stop bar is reached before the vehicle starts to respond
            if dist_to_next <= lag_dist:
                return cur_time + dist_to_next / cur_speed, cur_speed

            time_at_next += cfg.lag_time

        if dist_to_oper_speed > dist_to_next:
            # the next intersection is reached before getting to operating speed
            accel = cfg.max_accel if oper_speed >= cur_speed else -cfg.max_accel
            remaining_dist = max(dist_to_next - applied_lag_dist, 0.0)
            speed_at_next = math.sqrt(max(cur_speed * cur_speed + 2.0 * accel * remaining_dist, 0.0))
            time_at_next += abs(speed_at_next - cur_speed) / cfg.max_accel
        else:
            speed_at_next = oper_speed
            cruise_time = (dist_to_next - dist_to_oper_speed) / oper_speed
            time_at_next += time_to_oper_speed + cruise_time

        return time_at_next, speed_at_next

    def _terminal_neighbor(self, node: Node) -> Node:
        """
        No more intersections downtrack: the only neighbor is where operating speed is regained with a fraction of the
        max acceleration, at least a typical intersection width away.
        """
        cur_time = node.time_as_double
        cur_loc = node.distance_as_double
        cur_speed = node.speed_as_double
        oper_speed = self._operating_speed

        delta_time, delta_dist = NeighborUtils.time_and_distance_to_speed(cur_speed, oper_speed,
                                                                          self._config.fractional_max_accel)

        # limit it to be a reasonable distance away, even if we are already at operating speed
        if delta_dist < TYPICAL_INTERSECTION_WIDTH:
            delta_time += (TYPICAL_INTERSECTION_WIDTH - delta_dist) / oper_speed
            delta_dist = TYPICAL_INTERSECTION_WIDTH

        neighbor = Node.from_real_units(cur_loc + delta_dist, cur_time + delta_time, oper_speed)
        self._logger.debug("terminal neighbor: %s", neighbor)
        return neighbor
