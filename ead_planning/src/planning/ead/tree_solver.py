import heapq
import itertools
from logging import Logger
from typing import Callable, Dict, List, NamedTuple, Optional

from ead_planning.src.exceptions import NoPathFound, raises
from ead_planning.src.global_constants import LOG_MSG_EAD_SEARCH_STATS
from ead_planning.src.planning.ead.node import Node

GoalFunction = Callable[[Node], bool]
NeighborsFunction = Callable[[Node], List[Node]]
CostFunction = Callable[[Node, Node], float]
HeuristicFunction = Callable[[Node], float]


class SearchStatistics(NamedTuple):
    expanded: int       # number of vertices taken out of the open set and expanded
    generated: int      # number of successors returned by the neighbors function (repetitions included)
    distinct: int       # number of distinct states discovered, start included
    open_size: int      # number of vertices left in the open set when the search ended


class _VertexRecord:
    """Book keeping of a single state discovered by the search"""
    __slots__ = ('node', 'cost_so_far', 'predecessor', 'closed')

    def __init__(self, node: Node, cost_so_far: float, predecessor: Optional[Node]):
        self.node = node
        self.cost_so_far = cost_so_far
        self.predecessor = predecessor
        self.closed = False


class _OpenSet:
    """
    Priority queue of the vertices awaiting expansion, holding at most one live entry per state. Lowering the
    priority of a queued state invalidates its entry in place and queues a replacement.
    Ties of the estimated total cost are broken by lowest time, then lowest speed, then lowest distance.
    """
    _REMOVED = None

    def __init__(self):
        self._heap = []
        self._entries = {}  # type: Dict[Node, list]
        self._counter = itertools.count()

    def __len__(self):
        return len(self._entries)

    def __contains__(self, node: Node):
        return node in self._entries

    def push(self, node: Node, priority: float) -> None:
        if node in self._entries:
            self._entries.pop(node)[-1] = _OpenSet._REMOVED
        entry = [priority, node.time, node.speed, node.distance, next(self._counter), node]
        self._entries[node] = entry
        heapq.heappush(self._heap, entry)

    def pop(self) -> Node:
        while self._heap:
            node = heapq.heappop(self._heap)[-1]
            if node is not _OpenSet._REMOVED:
                del self._entries[node]
                return node
        raise KeyError('pop from an empty open set')


class AStarTreeSolver:
    """
    Best-first (A*) search over the quantized EAD state space. With a zero heuristic this is Dijkstra's algorithm.
    The search is synchronous and keeps no state between calls except the statistics of the last call.
    """

    def __init__(self, logger: Logger, max_expansions: Optional[int] = None):
        """
        :param logger:
        :param max_expansions: optional bound on the number of expansions of a single search, None for unbounded
        """
        self._logger = logger
        self._max_expansions = max_expansions
        self._statistics = SearchStatistics(0, 0, 0, 0)

    @property
    def statistics(self) -> SearchStatistics:
        return self._statistics

    @raises(NoPathFound)
    def solve(self, start: Node, is_goal: GoalFunction, neighbors: NeighborsFunction, cost: CostFunction,
              heuristic: HeuristicFunction) -> List[Node]:
        """
        Searches for the cheapest path from <start> to any goal node
        :param start: the initial vertex
        :param is_goal: predicate identifying goal vertices
        :param neighbors: expands a vertex into its successors
        :param cost: cost of the edge between a vertex and one of its successors (non negative)
        :param heuristic: estimate of the remaining cost from a vertex to the goal
        :return: the nodes of the path, from <start> to the goal node
        """
        records = {start: _VertexRecord(start, 0.0, None)}
        open_set = _OpenSet()
        open_set.push(start, heuristic(start))

        expanded = 0
        generated = 0
        try:
            while len(open_set) > 0:
                node = open_set.pop()
                record = records[node]
                record.closed = True

                if is_goal(node):
                    path = AStarTreeSolver._reconstruct_path(records, node)
                    self._logger.debug("AStarTreeSolver found a path of %d nodes with cost %s", len(path),
                                       record.cost_so_far)
                    return path

                if self._max_expansions is not None and expanded >= self._max_expansions:
                    raise NoPathFound('AStarTreeSolver: expansion limit of %d reached before a goal was found' %
                                      self._max_expansions)

                expanded += 1
                for child in neighbors(node):
                    generated += 1
                    child_record = records.get(child)
                    if child_record is not None and child_record.closed:
                        continue

                    cost_so_far = record.cost_so_far + cost(node, child)
                    if child_record is None:
                        records[child] = _VertexRecord(child, cost_so_far, node)
                        open_set.push(child, cost_so_far + heuristic(child))
                    elif cost_so_far < child_record.cost_so_far:
                        child_record.cost_so_far = cost_so_far
                        child_record.predecessor = node
                        open_set.push(child, cost_so_far + heuristic(child))

            raise NoPathFound('AStarTreeSolver: open set exhausted after %d expansions from %s without reaching a goal'
                              % (expanded, start))
        finally:
            self._statistics = SearchStatistics(expanded, generated, len(records), len(open_set))
            self._logger.debug(LOG_MSG_EAD_SEARCH_STATS, expanded, generated, len(open_set))

    @staticmethod
    def _reconstruct_path(records: Dict[Node, _VertexRecord], goal: Node) -> List[Node]:
        path = [goal]
        predecessor = records[goal].predecessor
        while predecessor is not None:
            path.append(predecessor)
            predecessor = records[predecessor].predecessor
        path.reverse()
        return path
