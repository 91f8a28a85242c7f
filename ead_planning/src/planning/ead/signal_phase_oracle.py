import math
from typing import NamedTuple, Tuple

from ead_planning.src.exceptions import UnknownIntersection, PhaseCycleUnresolvable, raises
from ead_planning.src.global_constants import EPS
from ead_planning.src.messages.intersection_message import IntersectionSnapshot, IntersectionData, SignalPhase, \
    PhaseCycle
from ead_planning.src.planning.types import PlanTimeInSec


class SignalState(NamedTuple):
    phase: SignalPhase
    time_remaining: float     # [sec] time left in <phase>


class SignalPhaseOracle:
    """
    Projects the signal phases of a frozen IntersectionSnapshot forward in plan time, assuming static (non-adaptive)
    signal timing. The snapshot is read only, so a single oracle can be queried from independent searches.
    """

    def __init__(self, snapshot: IntersectionSnapshot, max_phase_cycles: int):
        """
        :param snapshot: intersections ordered by stop bar distance, with phases sampled at snapshot.e_t_timestamp
        :param max_phase_cycles: farthest green onset accepted by next_green_onset(), in full signal cycles
        """
        self._snapshot = snapshot
        self._max_phase_cycles = int(max_phase_cycles)

    @property
    def num_intersections(self) -> int:
        return len(self._snapshot)

    @property
    def stop_bar_distances(self) -> Tuple[float, ...]:
        return tuple(data.e_l_stop_bar_distance for data in self._snapshot.as_intersections)

    @raises(UnknownIntersection)
    def stop_bar_distance(self, intersection_index: int) -> float:
        return self._get_intersection(intersection_index).e_l_stop_bar_distance

    @raises(UnknownIntersection)
    def phase_duration(self, intersection_index: int, phase: SignalPhase) -> float:
        return self._get_intersection(intersection_index).s_phase_cycle.duration(phase)

    @raises(UnknownIntersection, PhaseCycleUnresolvable)
    def phase_at(self, intersection_index: int, absolute_time: PlanTimeInSec) -> SignalState:
        """
        Returns the phase of the signal at a given plan time and the time left in that phase.
        An intersection whose current phase is unknown (NONE) is projected as unknown for all times.
        :param intersection_index: index of the intersection in the snapshot (0 is the closest)
        :param absolute_time: [sec] plan time of the query
        :return: SignalState of the intersection at <absolute_time>
        """
        data = self._get_intersection(intersection_index)
        if data.e_e_phase == SignalPhase.NONE:
            return SignalState(SignalPhase.NONE, 0.0)

        cycle = data.s_phase_cycle
        SignalPhaseOracle._validate_cycle(intersection_index, cycle)

        end_of_current_phase = self._snapshot.e_t_timestamp + max(data.e_t_time_remaining, 0.0)
        if absolute_time < end_of_current_phase:
            return SignalState(data.e_e_phase, end_of_current_phase - absolute_time)

        # position inside the cycle that starts right after the current phase ends
        elapsed = math.fmod(absolute_time - end_of_current_phase, cycle.cycle_length)
        phase = SignalPhaseOracle._next_known_phase(data.e_e_phase)
        for _ in range(2 * len(SignalPhase)):
            duration = cycle.duration(phase)
            if elapsed < duration:
                return SignalState(phase, duration - elapsed)
            elapsed -= duration
            phase = SignalPhaseOracle._next_known_phase(phase)

        raise PhaseCycleUnresolvable('SignalPhaseOracle: could not place time %s in the cycle of intersection %d (%s)'
                                     % (absolute_time, intersection_index, cycle))

    @raises(UnknownIntersection, PhaseCycleUnresolvable)
    def next_green_onset(self, intersection_index: int, after_time: PlanTimeInSec) -> PlanTimeInSec:
        """
        Returns the plan time at which the first green phase after <after_time> begins, i.e. the end of the first red
        phase which ends after <after_time>. Phases are advanced one by one, an unknown phase is an immediate
        transition to the following known phase, so red is reached within three transitions of any phase. An onset
        further than max_phase_cycles full cycles from <after_time> (a current phase predicted to outlast that many
        cycles) is not trusted.
        :param intersection_index: index of the intersection in the snapshot (0 is the closest)
        :param after_time: [sec] plan time after which a green onset is looked for
        :return: [sec] plan time at the beginning of the green phase
        """
        data = self._get_intersection(intersection_index)
        SignalPhaseOracle._validate_cycle(intersection_index, data.s_phase_cycle)

        state = self.phase_at(intersection_index, after_time)
        phase = state.phase
        phase_end_time = after_time + state.time_remaining

        while phase != SignalPhase.RED:
            phase = SignalPhaseOracle._next_known_phase(phase)
            phase_end_time += data.s_phase_cycle.duration(phase)

        horizon = after_time + self._max_phase_cycles * data.s_phase_cycle.cycle_length
        if phase_end_time > horizon + EPS:
            raise PhaseCycleUnresolvable('SignalPhaseOracle: green onset of intersection %d at %s is more than %d '
                                         'cycles after time %s' % (intersection_index, phase_end_time,
                                                                   self._max_phase_cycles, after_time))

        return phase_end_time

    @raises(UnknownIntersection)
    def _get_intersection(self, intersection_index: int) -> IntersectionData:
        if intersection_index < 0 or intersection_index >= len(self._snapshot):
            raise UnknownIntersection('SignalPhaseOracle: intersection index %s out of range of a snapshot with %d '
                                      'intersections' % (intersection_index, len(self._snapshot)))
        return self._snapshot.as_intersections[intersection_index]

    @staticmethod
    def _next_known_phase(phase: SignalPhase) -> SignalPhase:
        next_phase = phase.next()
        if next_phase == SignalPhase.NONE:
            next_phase = next_phase.next()
        return next_phase

    @staticmethod
    @raises(PhaseCycleUnresolvable)
    def _validate_cycle(intersection_index: int, cycle: PhaseCycle) -> None:
        durations = [cycle.e_t_green_duration, cycle.e_t_yellow_duration, cycle.e_t_red_duration]
        if not all(math.isfinite(duration) and duration >= 0 for duration in durations) or cycle.cycle_length <= 0:
            raise PhaseCycleUnresolvable('SignalPhaseOracle: malformed phase cycle of intersection %d: %s' %
                                         (intersection_index, cycle))
