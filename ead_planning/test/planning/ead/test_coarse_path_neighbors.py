from logging import Logger
from unittest.mock import patch

import pytest

from ead_planning.src.exceptions import UnknownIntersection
from ead_planning.src.messages.intersection_message import IntersectionSnapshot, SignalPhase
from ead_planning.src.planning.ead.coarse_path_neighbors import CoarsePathNeighbors
from ead_planning.src.planning.ead.ead_config import EadConfig
from ead_planning.src.planning.ead.node import Node
from ead_planning.src.planning.ead.signal_phase_oracle import SignalPhaseOracle
from ead_planning.test.planning.ead.ead_fixtures import single_intersection_snapshot, oracle_of


def _coarse_neighbors(logger: Logger, config: EadConfig, snapshot: IntersectionSnapshot) -> CoarsePathNeighbors:
    generator = CoarsePathNeighbors(logger, config)
    generator.initialize(oracle_of(snapshot))
    return generator


def test_neighbors_greenWithTwentySecondsRemaining_arrivesOnGreenAtOperatingSpeed(logger: Logger,
                                                                                  ead_config: EadConfig):
    # 10 -> 15 m/s after a lag of 1.9 sec (19 m): 2.5 sec and 31.25 m of acceleration, then cruising the rest of 200 m
    generator = _coarse_neighbors(logger, ead_config, single_intersection_snapshot(200.0, SignalPhase.GREEN, 20.0))
    node = Node.from_real_units(0.0, 0.0, 10.0)
    oracle = oracle_of(single_intersection_snapshot(200.0, SignalPhase.GREEN, 20.0))

    neighbors = generator.neighbors(node)

    green_arrivals = [neighbor for neighbor in neighbors if neighbor.speed > 0]
    assert len(green_arrivals) >= 1
    for arrival in green_arrivals:
        assert arrival.time_as_double < node.time_as_double + 20.0
        assert oracle.phase_at(0, arrival.time_as_double).phase == SignalPhase.GREEN
        assert arrival.speed_as_double <= ead_config.speed_limit
    assert neighbors == [Node.from_internal_units(2000, 144, 150),
                         # the next green (at 38 sec) can't be met above crawling speed, stop before it shows
                         Node.from_internal_units(2000, 340, 0)]


def test_neighbors_redAndStopBarWithinLagDistance_singleStopAndWaitNode(logger: Logger, ead_config: EadConfig):
    # 15 m to the stop bar is covered before the vehicle responds (lag distance of 19 m)
    generator = _coarse_neighbors(logger, ead_config, single_intersection_snapshot(200.0, SignalPhase.RED, 15.0))
    node = Node.from_real_units(185.0, 0.0, 10.0)

    neighbors = generator.neighbors(node)

    assert neighbors == [Node.from_real_units(200.0, 15.0 - 4.0, 0.0)]


def test_neighbors_nextGreenWithinLagTime_noSpeedAdjustFanOnlyStopAndWait(logger: Logger):
    # no time buffer: green shows 1.88 sec from now, before the vehicle responds to a speed command (lag of 1.9 sec)
    config = EadConfig(max_accel=2.0, lag_time=1.9, speed_limit=15.0, time_buffer=0.0)
    generator = _coarse_neighbors(logger, config, single_intersection_snapshot(27.6, SignalPhase.RED, 1.88))
    # 14.5 -> 15 m/sec is a negligible change (no lag): 27.6 m are covered in 1.84 sec, the bar is reached on red.
    # the stop bar is beyond the lag distance (1.9 * 14.5 = 27.55 m)
    node = Node.from_real_units(0.0, 0.0, 14.5)

    neighbors = generator.neighbors(node)

    # stop-and-wait is timed no earlier than one coarse time increment from now
    assert neighbors == [Node.from_real_units(27.6, 2.0, 0.0)]


def test_neighbors_redFarEnoughToAdjustSpeed_speedAdjustFanWithinNextGreen(logger: Logger, ead_config: EadConfig):
    # green onset at 10 sec, next green window is [14, 10 + 20 - 4] sec
    generator = _coarse_neighbors(logger, ead_config, single_intersection_snapshot(100.0, SignalPhase.RED, 10.0))
    node = Node.from_real_units(0.0, 0.0, 10.0)

    neighbors = generator.neighbors(node)

    # first speed: (2 * (100 - 19) / (14 - 1.9)) - 10, then 2 * 100 / 16 - 10, at 18 sec speed is below crawling
    assert neighbors == [Node.from_internal_units(1000, 140, 34), Node.from_internal_units(1000, 160, 25)]
    for neighbor in neighbors:
        assert 14.0 <= neighbor.time_as_double <= 10.0 + 20.0 - 4.0


def test_neighbors_longGreenAtOperatingSpeed_slicesGreenUntilCrawlingSpeed(logger: Logger, ead_config: EadConfig):
    # no speed change, arrival at 150 / 15 = 10 sec; green slices every 2 sec while above crawling speed
    generator = _coarse_neighbors(logger, ead_config, single_intersection_snapshot(150.0, SignalPhase.GREEN, 30.0,
                                                                                   green=30.0, yellow=3.0, red=20.0))
    node = Node.from_real_units(0.0, 0.0, 15.0)

    neighbors = generator.neighbors(node)

    assert neighbors == [Node.from_internal_units(1500, 100, 150),
                         Node.from_internal_units(1500, 120, 100),
                         Node.from_internal_units(1500, 140, 64),
                         Node.from_internal_units(1500, 160, 38),
                         # green onset at 53 sec can't be met above crawling speed
                         Node.from_internal_units(1500, 490, 0)]


def test_neighbors_decelerationToOperatingSpeed_arrivalSpeedDoesNotOvershoot(logger: Logger):
    config = EadConfig(max_accel=2.0, lag_time=1.9, speed_limit=15.0, operating_speed=10.0, time_buffer=4.0)
    generator = _coarse_neighbors(logger, config, single_intersection_snapshot(30.0, SignalPhase.GREEN, 60.0,
                                                                               green=60.0))
    node = Node.from_real_units(0.0, 0.0, 15.0)

    neighbors = generator.neighbors(node)

    # 1.5 m of deceleration are left after the lag: sqrt(15^2 - 2 * 2 * 1.5)
    assert neighbors[0] == Node.from_internal_units(300, 20, 148)
    assert config.operating_speed < neighbors[0].speed_as_double < 15.0


def test_neighbors_anyExpansion_successorsAreFeasible(logger: Logger, ead_config: EadConfig,
                                                     two_intersections_snapshot: IntersectionSnapshot):
    generator = CoarsePathNeighbors(logger, ead_config)
    generator.initialize(SignalPhaseOracle(two_intersections_snapshot, 4))

    for node in [Node.from_real_units(0.0, 0.0, 10.0), Node.from_real_units(0.0, 3.0, 0.0),
                 Node.from_real_units(150.0, 14.0, 12.0), Node.from_real_units(150.0, 30.0, 0.0),
                 Node.from_real_units(450.0, 60.0, 5.0)]:
        neighbors = generator.neighbors(node)

        assert len(neighbors) > 0
        assert len(set(neighbors)) == len(neighbors)
        for neighbor in neighbors:
            assert neighbor.time > node.time
            assert neighbor.distance > node.distance
            assert 0 <= neighbor.speed_as_double <= ead_config.speed_limit


def test_neighbors_nodeOnStopBar_targetsTheFollowingIntersection(logger: Logger, ead_config: EadConfig,
                                                                 two_intersections_snapshot: IntersectionSnapshot):
    generator = CoarsePathNeighbors(logger, ead_config)
    generator.initialize(SignalPhaseOracle(two_intersections_snapshot, 4))

    neighbors = generator.neighbors(Node.from_real_units(150.0, 14.0, 12.0))

    assert all(neighbor.distance_as_double == pytest.approx(450.0) for neighbor in neighbors)


def test_neighbors_standingOnStopBarOnRed_waitsInPlaceUntilGreenOnset(logger: Logger, ead_config: EadConfig):
    snapshot = single_intersection_snapshot(60.0, SignalPhase.RED, 40.0, green=30.0, yellow=3.0, red=40.0)
    generator = _coarse_neighbors(logger, ead_config, snapshot)

    hold = generator.neighbors(Node.from_real_units(60.0, 36.0, 0.0))
    departure = generator.neighbors(Node.from_real_units(60.0, 40.0, 0.0))

    assert hold == [Node.from_real_units(60.0, 40.0, 0.0)]
    assert oracle_of(snapshot).phase_at(0, hold[0].time_as_double).phase == SignalPhase.GREEN
    # 0 -> 15 m/sec at 0.75 * 2 m/sec^2 takes 10 sec over 75 m
    assert departure == [Node.from_real_units(135.0, 50.0, 15.0)]


def test_neighbors_standingOnStopBarOnYellow_waitsUntilTheEndOfRed(logger: Logger, ead_config: EadConfig):
    generator = _coarse_neighbors(logger, ead_config, single_intersection_snapshot(60.0, SignalPhase.YELLOW, 2.0,
                                                                                   red=10.0))

    assert generator.neighbors(Node.from_real_units(60.0, 0.5, 0.0)) == [Node.from_real_units(60.0, 12.0, 0.0)]


def test_neighbors_greenOnsetBetweenTimeUnits_waitingNodeRoundedUpToOnset(logger: Logger, ead_config: EadConfig):
    generator = _coarse_neighbors(logger, ead_config, single_intersection_snapshot(60.0, SignalPhase.RED, 40.04))

    assert generator.neighbors(Node.from_real_units(60.0, 36.0, 0.0)) == [Node.from_internal_units(600, 401, 0)]


def test_neighbors_maxNeighborsReached_capsPreservingOrder(logger: Logger):
    config = EadConfig(max_accel=2.0, lag_time=1.9, speed_limit=15.0, time_buffer=4.0, max_neighbors_per_expansion=2)
    generator = _coarse_neighbors(logger, config, single_intersection_snapshot(150.0, SignalPhase.GREEN, 30.0,
                                                                               green=30.0, yellow=3.0, red=20.0))

    neighbors = generator.neighbors(Node.from_real_units(0.0, 0.0, 15.0))

    assert neighbors == [Node.from_internal_units(1500, 100, 150), Node.from_internal_units(1500, 120, 100)]


def test_neighbors_noIntersectionsLeftSlowerThanOperatingSpeed_singleTerminalNodeAtAccelerationDistance(
        logger: Logger, ead_config: EadConfig):
    # fractional max acceleration of 0.75 * 2 = 1.5: 10 / 1.5 sec to accelerate 5 -> 15 over 10 * 10 / 1.5 m
    generator = _coarse_neighbors(logger, ead_config, single_intersection_snapshot(200.0, SignalPhase.GREEN, 20.0))

    neighbors = generator.neighbors(Node.from_real_units(250.0, 30.0, 5.0))

    assert neighbors == [Node.from_real_units(250.0 + 100.0 / 1.5, 30.0 + 10.0 / 1.5, 15.0)]


def test_neighbors_noIntersectionsLeftAtOperatingSpeed_extendedToTypicalIntersectionWidth(
        logger: Logger, ead_config: EadConfig, empty_snapshot: IntersectionSnapshot):
    generator = _coarse_neighbors(logger, ead_config, empty_snapshot)

    neighbors = generator.neighbors(Node.from_real_units(100.0, 10.0, 15.0))

    assert neighbors == [Node.from_real_units(140.0, 10.0 + 40.0 / 15.0, 15.0)]


def test_neighbors_intersectionMissingFromSnapshot_treatedAsPastTheLastIntersection(logger: Logger,
                                                                                    ead_config: EadConfig):
    generator = _coarse_neighbors(logger, ead_config, single_intersection_snapshot(200.0, SignalPhase.GREEN, 20.0))

    with patch.object(SignalPhaseOracle, 'stop_bar_distance', side_effect=UnknownIntersection('missing')):
        neighbors = generator.neighbors(Node.from_real_units(100.0, 10.0, 15.0))

    assert neighbors == [Node.from_real_units(140.0, 10.0 + 40.0 / 15.0, 15.0)]


def test_initialize_operatingSpeedAboveLimit_clippedToSpeedLimit(logger: Logger, ead_config: EadConfig,
                                                                 empty_snapshot: IntersectionSnapshot):
    generator = CoarsePathNeighbors(logger, ead_config)

    generator.initialize(oracle_of(empty_snapshot), operating_speed=20.0)

    assert generator.operating_speed == ead_config.speed_limit
