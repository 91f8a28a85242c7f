import numpy as np

# General constants
EPS = np.finfo(np.float32).eps
MPH_TO_MPS = 2.23694

# Quantized state

# power-of-ten exponents of the internal units: distance in 10^-1 [m], time in 10^-1 [sec], speed in 10^-1 [m/sec]
NODE_DISTANCE_UNITS = -1
NODE_TIME_UNITS = -1
NODE_SPEED_UNITS = -1

# EAD default tunables

# [m/sec^2] maximum longitudinal acceleration (and deceleration) used for planning
EAD_DEFAULT_MAX_ACCEL = 2.0

# [sec] response lag between a commanded speed change and its physical onset
EAD_DEFAULT_LAG_TIME = 1.9

# [m/sec] speed limit of the planned corridor (35 mph)
EAD_DEFAULT_SPEED_LIMIT = 35 / MPH_TO_MPS

# [m/sec] speed below which the vehicle is considered to be crawling (5 mph)
EAD_DEFAULT_CRAWLING_SPEED = 5 / MPH_TO_MPS

# [sec] safety margin kept from both ends of a green phase
EAD_DEFAULT_TIME_BUFFER = 4.0

# ratio of the max acceleration used to get back to operating speed beyond the last intersection
EAD_FRACTIONAL_ACCEL_RATIO = 0.75

# [sec] time slicing of green phases in the coarse grid
EAD_DEFAULT_COARSE_TIME_INCREMENT = 2.0

# [sec] time step of the fine grid
EAD_DEFAULT_FINE_TIME_INCREMENT = 1.0

# [m/sec] speed step of the fine grid
EAD_DEFAULT_FINE_SPEED_INCREMENT = 1.0

# number of full phase cycles scanned while looking for the onset of a green phase
EAD_DEFAULT_MAX_PHASE_CYCLES = 4

# upper bound on the successors emitted by a single expansion
EAD_DEFAULT_MAX_NEIGHBORS_PER_EXPANSION = 64

# [m] minimal distance of the terminal node beyond the last intersection
TYPICAL_INTERSECTION_WIDTH = 40.0

# [m/sec] speed changes smaller than this ignore the response lag
EAD_NEGLIGIBLE_SPEED_CHANGE = 1.0

# Cost models

# cost weight of every second of travel
EAD_TIME_COST_WEIGHT = 1.0

# cost weight of every [m/sec] of speed change between consecutive nodes
EAD_SPEED_CHANGE_COST_WEIGHT = 0.2

# cost of every full stop in the plan
EAD_STOP_COST = 10.0

#### NAMES OF MODULES FOR LOGGING ####
EAD_PLANNING_NAME_FOR_LOGGING = "EAD Planning"

##### Log messages
LOG_MSG_EAD_PLANNER_INPUT = "EadPlanner planning from state"
LOG_MSG_EAD_PLANNER_COARSE_OUTPUT = "EadPlanner coarse plan is"
LOG_MSG_EAD_PLANNER_FINE_OUTPUT = "EadPlanner fine plan is"
LOG_MSG_EAD_PLANNER_IMPL_TIME = "EadPlanner.plan time"
LOG_MSG_EAD_SEARCH_STATS = "AStarTreeSolver finished: expanded %d, generated %d, open %d"
LOG_MSG_PROFILER_PREFIX = "EadProfiler Stats: "

# bound on the expansions of the fine pass, which only refines an already feasible coarse plan
EAD_FINE_MAX_EXPANSIONS = 200000
