import numpy as np

## TIMESTAMPS ##
PlanTimeInSec = float                   # plan time in [sec], the time axis of the intersection snapshot

## EAD PROFILE ##

# a numpy matrix having rows of [EAD_D, EAD_T, EAD_V]
EadProfile = np.ndarray

# Column indices for ead-profile [downtrack distance, plan time, speed]
EAD_D, EAD_T, EAD_V = 0, 1, 2
EAD_PROFILE_LEN = 3
