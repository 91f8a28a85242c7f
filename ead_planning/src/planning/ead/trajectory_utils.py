from typing import List

import numpy as np

from ead_planning.src.global_constants import EPS
from ead_planning.src.planning.ead.node import Node
from ead_planning.src.planning.types import EadProfile, EAD_D, EAD_T, EAD_V, EAD_PROFILE_LEN


class TrajectoryUtils:
    @staticmethod
    def to_profile(path: List[Node]) -> EadProfile:
        """
        Converts a planned path into the matrix handed to the trajectory assembler
        :param path: nodes of the plan, ordered by time
        :return: 2D numpy array [N x EAD_PROFILE_LEN] of rows [EAD_D, EAD_T, EAD_V] in real world units
        """
        profile = np.zeros(shape=[len(path), EAD_PROFILE_LEN])
        for i, node in enumerate(path):
            profile[i, EAD_D] = node.distance_as_double
            profile[i, EAD_T] = node.time_as_double
            profile[i, EAD_V] = node.speed_as_double
        return profile

    @staticmethod
    def speed_at_time(profile: EadProfile, time: float) -> float:
        """
        Speed command at a given plan time, linearly interpolated between the profile points and held constant
        outside of the profile's time range
        :param profile: ead profile (see to_profile)
        :param time: [sec] plan time
        :return: [m/sec] speed
        """
        return float(np.interp(time, profile[:, EAD_T], profile[:, EAD_V]))

    @staticmethod
    def speed_at_distance(profile: EadProfile, distance: float) -> float:
        """
        Speed command at a given downtrack distance. Profile points sharing a distance (waiting in place) keep the
        last speed planned there.
        :param profile: ead profile (see to_profile)
        :param distance: [m] downtrack distance
        :return: [m/sec] speed
        """
        distances = profile[:, EAD_D]
        # np.interp needs increasing sample points, keep the last point of every run of equal distances
        is_last_of_run = np.append(np.diff(distances) > EPS, True)
        return float(np.interp(distance, distances[is_last_of_run], profile[is_last_of_run, EAD_V]))

    @staticmethod
    def validate_profile(profile: EadProfile, speed_limit: float) -> bool:
        """
        :param profile: ead profile (see to_profile)
        :param speed_limit: [m/sec]
        :return: True if time strictly increases, distance never decreases and speeds are within [0, speed_limit]
        """
        if len(profile) == 0:
            return False
        time_increases = np.all(np.diff(profile[:, EAD_T]) > 0)
        distance_non_decreasing = np.all(np.diff(profile[:, EAD_D]) >= 0)
        speeds_in_limits = np.all(np.logical_and(profile[:, EAD_V] >= 0, profile[:, EAD_V] <= speed_limit + EPS))
        return bool(time_increases and distance_non_decreasing and speeds_in_limits)
