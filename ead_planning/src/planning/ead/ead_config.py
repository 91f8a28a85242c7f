import math
from typing import Dict, Optional

from ead_planning.src.exceptions import InvalidEadConfiguration, raises
from ead_planning.src.global_constants import EAD_DEFAULT_MAX_ACCEL, EAD_DEFAULT_LAG_TIME, EAD_DEFAULT_SPEED_LIMIT, \
    EAD_DEFAULT_CRAWLING_SPEED, EAD_DEFAULT_TIME_BUFFER, EAD_FRACTIONAL_ACCEL_RATIO, \
    EAD_DEFAULT_COARSE_TIME_INCREMENT, EAD_DEFAULT_FINE_TIME_INCREMENT, EAD_DEFAULT_FINE_SPEED_INCREMENT, \
    EAD_DEFAULT_MAX_PHASE_CYCLES, EAD_DEFAULT_MAX_NEIGHBORS_PER_EXPANSION, MPH_TO_MPS


class EadConfig:
    def __init__(self,
                 max_accel: float = EAD_DEFAULT_MAX_ACCEL,
                 lag_time: float = EAD_DEFAULT_LAG_TIME,
                 speed_limit: float = EAD_DEFAULT_SPEED_LIMIT,
                 operating_speed: Optional[float] = None,
                 crawling_speed: float = EAD_DEFAULT_CRAWLING_SPEED,
                 time_buffer: float = EAD_DEFAULT_TIME_BUFFER,
                 fractional_accel_ratio: float = EAD_FRACTIONAL_ACCEL_RATIO,
                 coarse_time_increment: float = EAD_DEFAULT_COARSE_TIME_INCREMENT,
                 fine_time_increment: float = EAD_DEFAULT_FINE_TIME_INCREMENT,
                 fine_speed_increment: float = EAD_DEFAULT_FINE_SPEED_INCREMENT,
                 max_phase_cycles: int = EAD_DEFAULT_MAX_PHASE_CYCLES,
                 max_neighbors_per_expansion: int = EAD_DEFAULT_MAX_NEIGHBORS_PER_EXPANSION,
                 use_fine_pass: bool = True):
        """
        Tunables of the EAD planner. Instances are validated on construction so that a physically meaningless
        configuration is reported when the planner is set up and never discovered in the middle of a search.
        :param max_accel: [m/sec^2] maximal acceleration/deceleration magnitude
        :param lag_time: [sec] vehicle response lag
        :param speed_limit: [m/sec] maximal allowed speed
        :param operating_speed: [m/sec] desired cruise speed beyond the intersections (defaults to the speed limit)
        :param crawling_speed: [m/sec] speeds below this one are not planned for, except for a full stop
        :param time_buffer: [sec] margin kept from both ends of a green phase
        :param fractional_accel_ratio: ratio of max_accel used to regain operating speed past the last intersection
        :param coarse_time_increment: [sec] time slicing of green windows in the coarse grid
        :param fine_time_increment: [sec] time step of the fine grid
        :param fine_speed_increment: [m/sec] speed step of the fine grid
        :param max_phase_cycles: number of full signal cycles scanned for the onset of a green phase
        :param max_neighbors_per_expansion: cap on the successors of a single expansion
        :param use_fine_pass: whether the planner refines the first coarse leg with the fine grid
        """
        self.max_accel = max_accel
        self.lag_time = lag_time
        self.speed_limit = speed_limit
        self.operating_speed = speed_limit if operating_speed is None else operating_speed
        self.crawling_speed = crawling_speed
        self.time_buffer = time_buffer
        self.fractional_accel_ratio = fractional_accel_ratio
        self.coarse_time_increment = coarse_time_increment
        self.fine_time_increment = fine_time_increment
        self.fine_speed_increment = fine_speed_increment
        self.max_phase_cycles = max_phase_cycles
        self.max_neighbors_per_expansion = max_neighbors_per_expansion
        self.use_fine_pass = use_fine_pass

        self.validate()

    @property
    def fractional_max_accel(self) -> float:
        return self.max_accel * self.fractional_accel_ratio

    @raises(InvalidEadConfiguration)
    def validate(self) -> None:
        positive_values = {'max_accel': self.max_accel, 'speed_limit': self.speed_limit,
                           'operating_speed': self.operating_speed,
                           'fractional_accel_ratio': self.fractional_accel_ratio,
                           'coarse_time_increment': self.coarse_time_increment,
                           'fine_time_increment': self.fine_time_increment,
                           'fine_speed_increment': self.fine_speed_increment}
        non_negative_values = {'lag_time': self.lag_time, 'crawling_speed': self.crawling_speed,
                               'time_buffer': self.time_buffer}

        for name, value in positive_values.items():
            if not math.isfinite(value) or value <= 0:
                raise InvalidEadConfiguration('EadConfig: %s must be positive and finite, got %s' % (name, value))

        for name, value in non_negative_values.items():
            if not math.isfinite(value) or value < 0:
                raise InvalidEadConfiguration('EadConfig: %s must be non-negative and finite, got %s' % (name, value))

        if self.fractional_accel_ratio > 1.0:
            raise InvalidEadConfiguration('EadConfig: fractional_accel_ratio must not exceed 1, got %s' %
                                          self.fractional_accel_ratio)

        if self.operating_speed > self.speed_limit:
            raise InvalidEadConfiguration('EadConfig: operating_speed %s is above speed_limit %s' %
                                          (self.operating_speed, self.speed_limit))

        if self.crawling_speed >= self.operating_speed:
            raise InvalidEadConfiguration('EadConfig: crawling_speed %s must be below operating_speed %s' %
                                          (self.crawling_speed, self.operating_speed))

        if int(self.max_phase_cycles) != self.max_phase_cycles or self.max_phase_cycles < 1:
            raise InvalidEadConfiguration('EadConfig: max_phase_cycles must be a positive integer, got %s' %
                                          self.max_phase_cycles)

        if int(self.max_neighbors_per_expansion) != self.max_neighbors_per_expansion or \
                self.max_neighbors_per_expansion < 1:
            raise InvalidEadConfiguration('EadConfig: max_neighbors_per_expansion must be a positive integer, got %s' %
                                          self.max_neighbors_per_expansion)

    @classmethod
    @raises(InvalidEadConfiguration)
    def from_params(cls, params: Dict[str, float]):
        """
        Builds a configuration from the vehicle parameter set. Speeds in the parameter set are given in [mph],
        missing keys fall back to the defaults.
        :param params: dictionary of parameter name -> value
        :return: validated EadConfig
        """
        speed_limit = params.get('maximumSpeed', EAD_DEFAULT_SPEED_LIMIT * MPH_TO_MPS) / MPH_TO_MPS
        operating_speed = params.get('defaultSpeed')

        return cls(max_accel=params.get('defaultAccel', EAD_DEFAULT_MAX_ACCEL),
                   lag_time=params.get('ead.response.lag', EAD_DEFAULT_LAG_TIME),
                   speed_limit=speed_limit,
                   operating_speed=None if operating_speed is None else operating_speed / MPH_TO_MPS,
                   crawling_speed=params.get('crawlingSpeed', EAD_DEFAULT_CRAWLING_SPEED * MPH_TO_MPS) / MPH_TO_MPS,
                   time_buffer=params.get('ead.timebuffer', EAD_DEFAULT_TIME_BUFFER),
                   fractional_accel_ratio=params.get('ead.fractional.accel', EAD_FRACTIONAL_ACCEL_RATIO),
                   coarse_time_increment=params.get('ead.coarse_time_inc', EAD_DEFAULT_COARSE_TIME_INCREMENT),
                   fine_time_increment=params.get('ead.fine_time_inc', EAD_DEFAULT_FINE_TIME_INCREMENT),
                   fine_speed_increment=params.get('ead.fine_speed_inc', EAD_DEFAULT_FINE_SPEED_INCREMENT),
                   max_phase_cycles=params.get('ead.max_phase_cycles', EAD_DEFAULT_MAX_PHASE_CYCLES),
                   max_neighbors_per_expansion=params.get('ead.max_neighbors', EAD_DEFAULT_MAX_NEIGHBORS_PER_EXPANSION),
                   use_fine_pass=bool(params.get('ead.use_fine_pass', True)))

    def __str__(self):
        return "EadConfig(%s)" % ", ".join("%s=%s" % (key, value) for key, value in sorted(self.__dict__.items()))
