import logging

import pytest

from ead_planning.src.messages.intersection_message import IntersectionSnapshot, IntersectionData, SignalPhase, \
    PhaseCycle
from ead_planning.src.planning.ead.ead_config import EadConfig
from ead_planning.test.planning.ead.ead_fixtures import TEST_SPEED_LIMIT


@pytest.fixture(scope='function')
def logger() -> logging.Logger:
    yield logging.getLogger("EAD_TEST_LOGGER")


@pytest.fixture(scope='function')
def ead_config() -> EadConfig:
    """max accel 2 [m/sec^2], lag 1.9 [sec], time buffer 4 [sec], speed limit = operating speed = 15 [m/sec]"""
    yield EadConfig(max_accel=2.0, lag_time=1.9, speed_limit=TEST_SPEED_LIMIT, operating_speed=TEST_SPEED_LIMIT,
                    time_buffer=4.0, coarse_time_increment=2.0, fine_time_increment=1.0, fine_speed_increment=1.0)


@pytest.fixture(scope='function')
def empty_snapshot() -> IntersectionSnapshot:
    yield IntersectionSnapshot(0.0, [])


@pytest.fixture(scope='function')
def two_intersections_snapshot() -> IntersectionSnapshot:
    # given out of order on purpose, the snapshot orders them by stop bar distance
    yield IntersectionSnapshot(0.0, [
        IntersectionData(8, 450.0, SignalPhase.RED, 12.0, PhaseCycle(25.0, 3.0, 20.0)),
        IntersectionData(7, 150.0, SignalPhase.GREEN, 10.0, PhaseCycle(20.0, 3.0, 15.0))])
