"""
Flap Arena
==========

Arcade side-scrolling avoidance game core: an avatar falls under gravity,
jumps through procedurally spawned obstacle pairs, collects coins, shields
and weapons, and survives hostile hazards and their projectiles.

All tunable parameters live in difficulty_profiles.yaml.
"""
