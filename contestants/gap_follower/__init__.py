"""
Baseline Gap Follower Package

A simple heuristic agent that jumps to stay near the next gap's centre.
Serves as a benchmark and example.
"""

from .agent import FlapAgent, create_agent

__all__ = ["FlapAgent", "create_agent"]
