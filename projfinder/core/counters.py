# projfinder/core/counters.py
from dataclasses import dataclass

@dataclass
class RunCounters:
    # per-run tallies: roots the detectors reported, and roots newly added to the registry.
    found: int = 0
    added: int = 0
