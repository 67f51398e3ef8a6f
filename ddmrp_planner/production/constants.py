"""Centralized constants for plan evaluation.

This module contains the default objective weights and the large constants
used by the objective penalty and the replenishment consistency constraint.
"""

# ============================================================================
# OBJECTIVE WEIGHTS
# ============================================================================

#: Weight of the mean buffer level (inventory holding)
DEFAULT_BUFFER_WEIGHT = 1.0

#: Weight of the mean unmet demand at key buffered stations
DEFAULT_UNMET_DEMAND_WEIGHT = 100.0

#: Weight of each activated buffer (fixed cost of holding a decoupling point)
DEFAULT_ACTIVATION_WEIGHT = 10.0


# ============================================================================
# PENALTIES AND BOUNDS
# ============================================================================

#: Unmet demand reported when an input station has no buffered station
#: upstream of it (including itself); makes such placements unattractive
UNMET_DEMAND_PENALTY = 1e9

#: Big-M constant of the replenishment consistency constraint
#: Must dominate |TOY - net flow| for the constraint to be a pure consistency check
REPLENISHMENT_BIG_NUMBER = 1e6
