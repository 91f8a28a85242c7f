import math

from ead_planning.src.global_constants import NODE_DISTANCE_UNITS, NODE_TIME_UNITS, NODE_SPEED_UNITS


class Node:
    """
    Vehicle state (downtrack distance, plan time, speed) used as a vertex of the EAD search graph.
    Values are held as integers in internal units (10^NODE_*_UNITS of [m], [sec], [m/sec]) so that equality and hash
    are exact and depend only on the state, never on object identity or on floating point arithmetic. The values in
    real world units are computed once on construction.
    Nodes are immutable.
    """
    __slots__ = ('_distance', '_time', '_speed', '_distance_double', '_time_double', '_speed_double')

    DISTANCE_UNITS = NODE_DISTANCE_UNITS
    TIME_UNITS = NODE_TIME_UNITS
    SPEED_UNITS = NODE_SPEED_UNITS

    # conversion factors from real world units to internal units
    M_TO_DIST_UNITS = 10.0 ** -DISTANCE_UNITS
    S_TO_TIME_UNITS = 10.0 ** -TIME_UNITS
    M_PER_S_TO_SPEED_UNITS = 10.0 ** -SPEED_UNITS

    def __init__(self, distance: int, time: int, speed: int):
        """
        Use from_real_units() or from_internal_units() rather than this constructor
        :param distance: distance in internal units
        :param time: time in internal units
        :param speed: speed in internal units
        """
        object.__setattr__(self, '_distance', int(distance))
        object.__setattr__(self, '_time', int(time))
        object.__setattr__(self, '_speed', int(speed))
        object.__setattr__(self, '_distance_double', self._distance / Node.M_TO_DIST_UNITS)
        object.__setattr__(self, '_time_double', self._time / Node.S_TO_TIME_UNITS)
        object.__setattr__(self, '_speed_double', self._speed / Node.M_PER_S_TO_SPEED_UNITS)

    @classmethod
    def from_real_units(cls, distance: float, time: float, speed: float):
        """
        Rounds (half-up) real world values to the nearest internal unit
        :param distance: [m]
        :param time: [sec]
        :param speed: [m/sec]
        :return: the quantized Node
        """
        return cls(math.floor(distance * Node.M_TO_DIST_UNITS + 0.5),
                   math.floor(time * Node.S_TO_TIME_UNITS + 0.5),
                   math.floor(speed * Node.M_PER_S_TO_SPEED_UNITS + 0.5))

    @classmethod
    def from_internal_units(cls, distance: int, time: int, speed: int):
        return cls(distance, time, speed)

    @property
    def distance(self) -> int:
        """distance in internal units"""
        return self._distance

    @property
    def time(self) -> int:
        """time in internal units"""
        return self._time

    @property
    def speed(self) -> int:
        """speed in internal units"""
        return self._speed

    @property
    def distance_as_double(self) -> float:
        """distance in [m]"""
        return self._distance_double

    @property
    def time_as_double(self) -> float:
        """time in [sec]"""
        return self._time_double

    @property
    def speed_as_double(self) -> float:
        """speed in [m/sec]"""
        return self._speed_double

    @staticmethod
    def distance_resolution() -> float:
        return 1.0 / Node.M_TO_DIST_UNITS

    @staticmethod
    def time_resolution() -> float:
        return 1.0 / Node.S_TO_TIME_UNITS

    @staticmethod
    def speed_resolution() -> float:
        return 1.0 / Node.M_PER_S_TO_SPEED_UNITS

    def __setattr__(self, key, value):
        raise AttributeError("Node is immutable, can't set attribute %s" % key)

    def __delattr__(self, key):
        raise AttributeError("Node is immutable, can't delete attribute %s" % key)

    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, Node):
            return NotImplemented
        return self._distance == other._distance and self._time == other._time and self._speed == other._speed

    def __hash__(self):
        return hash((self._distance, self._time, self._speed))

    def __repr__(self):
        return "Node{distance=%8d, time=%6d, speed=%4d}" % (self._distance, self._time, self._speed)
