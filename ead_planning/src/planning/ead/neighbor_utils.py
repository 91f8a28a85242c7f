import math
from typing import List, Optional, Sequence, Tuple

from ead_planning.src.global_constants import EPS
from ead_planning.src.messages.intersection_message import SignalPhase
from ead_planning.src.planning.ead.node import Node
from ead_planning.src.planning.ead.signal_phase_oracle import SignalPhaseOracle


class NeighborUtils:
    @staticmethod
    def quantize_distance(distance: float) -> int:
        """
        :param distance: [m]
        :return: the distance in Node internal units, rounded the same way Node.from_real_units() rounds
        """
        return math.floor(distance * Node.M_TO_DIST_UNITS + 0.5)

    @staticmethod
    def next_intersection_index(stop_bar_distances: Sequence[float], node: Node) -> Optional[int]:
        """
        Finds the first intersection whose stop bar is at least one internal distance unit downtrack of the node.
        A node sitting on top of a stop bar (the way nodes placed at intersections do) has already reached it.
        :param stop_bar_distances: [m] stop bar distances, ordered by increasing distance
        :param node: the vertex being expanded
        :return: the index of the next intersection or None if no intersection remains downtrack
        """
        for intersection_index, stop_bar_distance in enumerate(stop_bar_distances):
            if NeighborUtils.quantize_distance(stop_bar_distance) - node.distance >= 1:
                return intersection_index
        return None

    @staticmethod
    def time_and_distance_to_speed(current_speed: float, target_speed: float, accel: float) -> Tuple[float, float]:
        """
        Constant acceleration change of speed. Deceleration uses the same magnitude of acceleration, so the
        distance is the average speed times the duration in both directions.
        :param current_speed: [m/sec]
        :param target_speed: [m/sec]
        :param accel: [m/sec^2] magnitude of the acceleration, must be positive
        :return: ([sec] duration of the speed change, [m] distance covered during it)
        """
        delta_time = abs(target_speed - current_speed) / accel
        delta_dist = 0.5 * (current_speed + target_speed) * delta_time
        return delta_time, delta_dist

    @staticmethod
    def chord_speed(distance: float, elapsed_time: float, current_speed: float) -> float:
        """
        Arrival speed of a constant acceleration motion covering <distance> in <elapsed_time> starting at
        <current_speed>. May be negative, which means no such motion exists without reversing.
        :param distance: [m] distance to cover
        :param elapsed_time: [sec] duration of the motion, must be positive
        :param current_speed: [m/sec] speed at the beginning of the motion
        :return: [m/sec] speed at the end of the motion
        """
        return 2.0 * distance / elapsed_time - current_speed

    @staticmethod
    def crossing_time(distance: float, start_speed: float, end_speed: float, duration: float) -> float:
        """
        Time it takes a constant acceleration segment (start_speed -> end_speed over <duration>) to cover <distance>.
        :param distance: [m] distance from the segment start to the point of interest (within the segment)
        :param start_speed: [m/sec]
        :param end_speed: [m/sec]
        :param duration: [sec] duration of the whole segment
        :return: [sec] time since the segment start, clipped to [0, duration]
        """
        if distance <= 0:
            return 0.0
        accel = (end_speed - start_speed) / duration
        if abs(accel) < EPS:
            crossing = distance / start_speed if start_speed > EPS else duration
        else:
            discriminant = max(start_speed * start_speed + 2.0 * accel * distance, 0.0)
            crossing = (-start_speed + math.sqrt(discriminant)) / accel
        return min(max(crossing, 0.0), duration)

    @staticmethod
    def is_green_at(oracle: SignalPhaseOracle, intersection_index: int, absolute_time: float) -> bool:
        return oracle.phase_at(intersection_index, absolute_time).phase == SignalPhase.GREEN

    @staticmethod
    def is_green_with_margin(oracle: SignalPhaseOracle, intersection_index: int, absolute_time: float,
                             margin: float) -> bool:
        """
        Checks that a single green phase covers [absolute_time - margin, absolute_time + margin]
        :param oracle: signal phases of the snapshot
        :param intersection_index: index of the intersection in the snapshot
        :param absolute_time: [sec] plan time the stop bar is passed
        :param margin: [sec] time kept from both ends of the green phase
        :return: True if the stop bar may be passed at <absolute_time>
        """
        state = oracle.phase_at(intersection_index, absolute_time - margin)
        return state.phase == SignalPhase.GREEN and state.time_remaining >= 2.0 * margin - EPS

    @staticmethod
    def is_feasible_successor(parent: Node, child: Node, speed_limit: float) -> bool:
        """
        Successors must move forward in time and keep a non negative speed within the speed limit
        :param parent: the vertex being expanded
        :param child: the candidate successor
        :param speed_limit: [m/sec]
        :return: True if <child> may be emitted
        """
        speed_limit_units = math.floor(speed_limit * Node.M_PER_S_TO_SPEED_UNITS + 0.5)
        return child.time > parent.time and 0 <= child.speed <= speed_limit_units

    @staticmethod
    def unique(candidates: List[Node], max_count: int) -> List[Node]:
        """
        Removes repeated states (keeping the first occurrence) and caps the number of candidates
        :param candidates: candidate successors in their order of generation
        :param max_count: maximal number of candidates to keep
        :return: ordered list of distinct candidates
        """
        return list(dict.fromkeys(candidates))[:max_count]
