"""Shared constants for archshift.

This module contains constants that are used across multiple modules
to avoid duplication and ensure consistency.
"""

# =============================================================================
# Migration Scope
# =============================================================================

# Supported target regions (code -> display name)
TARGET_REGIONS = {
    "us-east-1": "US East (N. Virginia)",
    "eu-central-1": "EU (Frankfurt)",
    "ap-southeast-2": "Asia Pacific (Sydney)",
    "ap-south-1": "Asia Pacific (Mumbai)",
}

DEFAULT_TARGET_REGION = "us-east-1"

# =============================================================================
# Migration Simulation
# =============================================================================

# Prefix of the simulated replication-service job reference
JOB_REF_PREFIX = "MGN-"
JOB_REF_LENGTH = 4
JOB_REF_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"

# Probability that a replicating job is still replicating after a tick
REPLICATING_STAY_PROBABILITY = 0.7

# Probability that a pending cutover succeeds
CUTOVER_SUCCESS_PROBABILITY = 0.9

# Seconds between simulator ticks
DEFAULT_TICK_INTERVAL = 3.0
