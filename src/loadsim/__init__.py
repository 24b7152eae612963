"""
loadsim: Segment Contention Simulator

A simulator of independently-arriving workloads contending for a shared
pool of processing segments, where overload degrades capacity instead of
merely queuing work.

Core concepts:
- Sessions issue queries, one at a time
- Each query fans out into one slice per segment
- Slices compete for a segment's per-tick capacity
- Running more slices than cores triggers the degradation curve
- Degraded capacity slows retirement, which keeps slices running longer
"""

__version__ = "0.1.0"
