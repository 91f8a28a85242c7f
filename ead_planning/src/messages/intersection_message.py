from enum import Enum
from typing import Iterable, Tuple


class SignalPhase(Enum):
    GREEN = 0
    YELLOW = 1
    RED = 2
    NONE = 3

    def next(self):
        # type: () -> SignalPhase
        """
        :return: the phase following this one in the fixed cycle GREEN -> YELLOW -> RED -> NONE -> GREEN
        """
        members = list(SignalPhase)
        return members[(members.index(self) + 1) % len(members)]


class PhaseCycle:
    e_t_green_duration = float
    e_t_yellow_duration = float
    e_t_red_duration = float

    def __init__(self, e_t_green_duration: float, e_t_yellow_duration: float, e_t_red_duration: float):
        """
        Static (non-adaptive) signal timing of a single intersection approach
        :param e_t_green_duration: [sec] duration of the green phase
        :param e_t_yellow_duration: [sec] duration of the yellow phase
        :param e_t_red_duration: [sec] duration of the red phase
        """
        self.e_t_green_duration = e_t_green_duration
        self.e_t_yellow_duration = e_t_yellow_duration
        self.e_t_red_duration = e_t_red_duration

    def duration(self, phase: SignalPhase) -> float:
        """
        :param phase: the phase of interest
        :return: [sec] its duration. the unknown phase NONE has no duration
        """
        if phase == SignalPhase.GREEN:
            return self.e_t_green_duration
        if phase == SignalPhase.YELLOW:
            return self.e_t_yellow_duration
        if phase == SignalPhase.RED:
            return self.e_t_red_duration
        return 0.0

    @property
    def cycle_length(self) -> float:
        return self.e_t_green_duration + self.e_t_yellow_duration + self.e_t_red_duration

    def __str__(self):
        return "PhaseCycle{green=%.1f, yellow=%.1f, red=%.1f}" % \
               (self.e_t_green_duration, self.e_t_yellow_duration, self.e_t_red_duration)


class IntersectionData:
    e_i_intersection_id = int
    e_l_stop_bar_distance = float
    e_e_phase = SignalPhase
    e_t_time_remaining = float
    s_phase_cycle = PhaseCycle

    def __init__(self, e_i_intersection_id: int, e_l_stop_bar_distance: float, e_e_phase: SignalPhase,
                 e_t_time_remaining: float, s_phase_cycle: PhaseCycle):
        """
        Signal phase prediction of a single intersection, as delivered by the V2I ingestion
        :param e_i_intersection_id: ID of the intersection (as reported over V2I)
        :param e_l_stop_bar_distance: [m] downtrack distance of the stop bar of the host lane
        :param e_e_phase: phase of the signal at the snapshot time
        :param e_t_time_remaining: [sec] time remaining in the current phase at the snapshot time
        :param s_phase_cycle: durations of the phases of the signal
        """
        self.e_i_intersection_id = e_i_intersection_id
        self.e_l_stop_bar_distance = e_l_stop_bar_distance
        self.e_e_phase = e_e_phase
        self.e_t_time_remaining = e_t_time_remaining
        self.s_phase_cycle = s_phase_cycle

    def __str__(self):
        return "IntersectionData{id=%d, stop_bar=%.1f, phase=%s, remaining=%.1f, %s}" % \
               (self.e_i_intersection_id, self.e_l_stop_bar_distance, self.e_e_phase.name, self.e_t_time_remaining,
                self.s_phase_cycle)


class IntersectionSnapshot:
    def __init__(self, e_t_timestamp: float, as_intersections: Iterable[IntersectionData]):
        """
        Frozen view of the upcoming intersections handed to the planner for a single planning call.
        Intersections are kept ordered by increasing stop bar distance, so the index of an intersection is its
        position in this ordering.
        :param e_t_timestamp: [sec] plan time at which the phases and remaining times were sampled
        :param as_intersections: the intersections downtrack of the host (any order)
        """
        self._e_t_timestamp = e_t_timestamp
        self._as_intersections = tuple(sorted(as_intersections, key=lambda data: data.e_l_stop_bar_distance))

    @property
    def e_t_timestamp(self) -> float:
        return self._e_t_timestamp

    @property
    def as_intersections(self) -> Tuple[IntersectionData, ...]:
        return self._as_intersections

    def __len__(self):
        return len(self._as_intersections)

    def __str__(self):
        return "IntersectionSnapshot{timestamp=%.1f, intersections=[%s]}" % \
               (self._e_t_timestamp, ", ".join(str(data) for data in self._as_intersections))
