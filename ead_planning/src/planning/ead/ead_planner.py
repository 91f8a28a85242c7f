import traceback
from logging import Logger
from typing import Callable, List, NamedTuple, Optional

from ead_planning.src.exceptions import NoPathFound, UnknownIntersection, PhaseCycleUnresolvable, raises
from ead_planning.src.global_constants import LOG_MSG_EAD_PLANNER_INPUT, LOG_MSG_EAD_PLANNER_COARSE_OUTPUT, \
    LOG_MSG_EAD_PLANNER_FINE_OUTPUT, LOG_MSG_EAD_PLANNER_IMPL_TIME, EAD_FINE_MAX_EXPANSIONS
from ead_planning.src.messages.intersection_message import IntersectionSnapshot
from ead_planning.src.planning.ead.coarse_path_neighbors import CoarsePathNeighbors
from ead_planning.src.planning.ead.cost_models import CostModel, EcoCostModel
from ead_planning.src.planning.ead.ead_config import EadConfig
from ead_planning.src.planning.ead.fine_path_neighbors import FinePathNeighbors
from ead_planning.src.planning.ead.neighbor_generator import NeighborGenerator
from ead_planning.src.planning.ead.node import Node
from ead_planning.src.planning.ead.signal_phase_oracle import SignalPhaseOracle
from ead_planning.src.planning.ead.trajectory_utils import TrajectoryUtils
from ead_planning.src.planning.ead.tree_solver import AStarTreeSolver
from ead_planning.src.planning.types import EadProfile
from ead_planning.src.utils.ead_profiler import EadProfiler

NeighborGeneratorFactory = Callable[[Logger, EadConfig], NeighborGenerator]


class EadPlan(NamedTuple):
    coarse_path: List[Node]         # nodes at the stop bars and beyond the last intersection
    fine_path: Optional[List[Node]]  # refinement of the first coarse leg, None if not computed or not found
    profile: EadProfile             # fine path and its coarse continuation, or the coarse path (see TrajectoryUtils)


class EadPlanner:
    """
    Plans the longitudinal profile through a chain of signalized intersections: a coarse search over the stop bars
    establishes a feasible corridor up to operating speed beyond the last intersection, then a fine search refines
    the first leg of that corridor for execution and the coarse search resumes from where the refinement ends, so that
    consecutive states of the profile are reachable from one another.
    Every call works on its own oracle and generators, nothing from the intersection snapshot is kept between calls.
    """

    def __init__(self, logger: Logger, config: EadConfig,
                 coarse_factory: NeighborGeneratorFactory = CoarsePathNeighbors,
                 fine_factory: NeighborGeneratorFactory = FinePathNeighbors,
                 max_fine_expansions: Optional[int] = EAD_FINE_MAX_EXPANSIONS):
        """
        :param logger:
        :param config: validated planner tunables
        :param coarse_factory: builds the generator of the coarse pass
        :param fine_factory: builds the generator of the fine pass
        :param max_fine_expansions: bound on the expansions of the fine pass, None for unbounded
        """
        self._logger = logger
        self._config = config
        self._coarse_factory = coarse_factory
        self._fine_factory = fine_factory
        self._coarse_solver = AStarTreeSolver(logger)
        self._fine_solver = AStarTreeSolver(logger, max_expansions=max_fine_expansions)
        self._logger.info("Initialized EAD Planner with %s", config)

    @property
    def coarse_solver(self) -> AStarTreeSolver:
        return self._coarse_solver

    @property
    def fine_solver(self) -> AStarTreeSolver:
        return self._fine_solver

    @raises(NoPathFound, UnknownIntersection, PhaseCycleUnresolvable)
    def plan(self, distance: float, time: float, speed: float, snapshot: IntersectionSnapshot) -> EadPlan:
        """
        Plans from the current vehicle state through the intersections of <snapshot>.
        Failing to find a coarse plan is raised to the caller, who should hold or stop rather than keep executing a
        stale profile. Failing to refine the first leg, or to resume the coarse search from the end of the refinement,
        falls back to the coarse plan.
        :param distance: [m] current downtrack distance of the vehicle
        :param time: [sec] current plan time
        :param speed: [m/sec] current speed
        :param snapshot: the signal phase predictions, frozen for this call
        :return: the coarse plan, its fine refinement and the resulting profile
        """
        start = Node.from_real_units(distance, time, speed)
        self._logger.info("%s %s through %s", LOG_MSG_EAD_PLANNER_INPUT, start, snapshot)

        oracle = SignalPhaseOracle(snapshot, self._config.max_phase_cycles)

        with EadProfiler(self.__class__.__name__ + '.plan') as profiler:
            try:
                coarse_path = self._plan_coarse(start, oracle)
            except (NoPathFound, UnknownIntersection, PhaseCycleUnresolvable) as e:
                self._logger.error("EadPlanner: coarse planning from %s failed: %s. Trace: %s", start, e,
                                   traceback.format_exc())
                raise
            self._logger.info("%s %s", LOG_MSG_EAD_PLANNER_COARSE_OUTPUT, coarse_path)

            fine_path = None
            planned_path = coarse_path
            if self._config.use_fine_pass and len(coarse_path) > 1:
                try:
                    fine_path = self._plan_fine(start, coarse_path[1], oracle)
                    self._logger.info("%s %s", LOG_MSG_EAD_PLANNER_FINE_OUTPUT, fine_path)
                    # the rest of the corridor is re-planned from where the fine path actually ends
                    continuation = self._plan_coarse(fine_path[-1], oracle)
                    planned_path = fine_path + continuation[1:]
                except (NoPathFound, UnknownIntersection, PhaseCycleUnresolvable) as e:
                    self._logger.warning("EadPlanner: fine planning toward %s failed (%s), falling back to the "
                                         "coarse plan", coarse_path[1], e)
                    fine_path = None

        self._logger.info("%s %s", LOG_MSG_EAD_PLANNER_IMPL_TIME, profiler.running_time)

        return EadPlan(coarse_path, fine_path, TrajectoryUtils.to_profile(planned_path))

    def _plan_coarse(self, start: Node, oracle: SignalPhaseOracle) -> List[Node]:
        generator = self._coarse_factory(self._logger, self._config)
        generator.initialize(oracle)

        stop_bars = oracle.stop_bar_distances
        # goal: past the last stop bar (by at least one internal unit) at operating speed
        goal_distance = stop_bars[-1] + Node.distance_resolution() if stop_bars else start.distance_as_double
        cost_model = EcoCostModel(goal_distance, self._config.speed_limit, goal_speed=self._config.operating_speed)

        return self._solve(self._coarse_solver, start, generator, cost_model)

    def _plan_fine(self, start: Node, target: Node, oracle: SignalPhaseOracle) -> List[Node]:
        generator = self._fine_factory(self._logger, self._config)
        generator.initialize(oracle)

        cost_model = EcoCostModel(target.distance_as_double, self._config.speed_limit)

        return self._solve(self._fine_solver, start, generator, cost_model)

    @staticmethod
    def _solve(solver: AStarTreeSolver, start: Node, generator: NeighborGenerator, cost_model: CostModel) -> \
            List[Node]:
        return solver.solve(start, cost_model.is_goal, generator.neighbors, cost_model.cost, cost_model.heuristic)
