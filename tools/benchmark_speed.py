"""
Performance Benchmark
=====================

Measures engine frame throughput and environment step throughput per
difficulty profile.

Usage:
    python -m tools.benchmark_speed [--frames N] [--difficulty easy hard crazy]
"""

from __future__ import annotations

import argparse
import sys
import time
from typing import List

import numpy as np

from flap_arena.arena_core.config_loader import load_profile
from flap_arena.arena_core.env_gym import FlapArenaEnv
from flap_arena.arena_core.game import CoreGame

# Random-jump probability per frame; roughly keeps the avatar airborne
JUMP_CHANCE = 0.08


def benchmark_core_game(difficulty: str, num_frames: int = 5000, seed: int = 42) -> dict:
    """Benchmark raw CoreGame frames without Gym overhead. Ended sessions are reset."""
    profile = load_profile(difficulty)
    game = CoreGame(profile, seed=seed)
    rng = np.random.default_rng(seed)
    dt = 1.0 / profile.engine.fps

    game.reset(seed=seed)
    resets = 0
    start = time.perf_counter()

    for _ in range(num_frames):
        if rng.random() < JUMP_CHANCE:
            game.jump()
        result = game.update(dt)
        if result.terminated:
            game.reset()
            resets += 1

    elapsed = time.perf_counter() - start

    return {
        "mode": "core_game",
        "difficulty": difficulty,
        "num_steps": num_frames,
        "resets": resets,
        "elapsed_seconds": elapsed,
        "steps_per_second": num_frames / elapsed,
        "ms_per_step": (elapsed * 1000) / num_frames,
    }


def benchmark_env(difficulty: str, num_steps: int = 2000, seed: int = 42) -> dict:
    """Benchmark FlapArenaEnv steps including observation packing."""
    env = FlapArenaEnv(difficulty=difficulty)
    rng = np.random.default_rng(seed)

    env.reset(seed=seed)
    start = time.perf_counter()

    for _ in range(num_steps):
        action = int(rng.random() < JUMP_CHANCE * 2)
        _, _, terminated, truncated, _ = env.step(action)
        if terminated or truncated:
            env.reset()

    elapsed = time.perf_counter() - start
    env.close()

    return {
        "mode": "env",
        "difficulty": difficulty,
        "num_steps": num_steps,
        "elapsed_seconds": elapsed,
        "steps_per_second": num_steps / elapsed,
        "ms_per_step": (elapsed * 1000) / num_steps,
    }


def run_all_benchmarks(difficulties: List[str], frames: int) -> list:
    """Run the benchmarks for every requested profile."""
    results = []

    print("=" * 60)
    print("FLAP ARENA PERFORMANCE BENCHMARK")
    print("=" * 60)
    print()

    for name in difficulties:
        print(f"Benchmarking CoreGame ({name})...")
        result = benchmark_core_game(name, num_frames=frames)
        results.append(result)
        print(f"  Frames/sec: {result['steps_per_second']:.1f}")
        print()

        print(f"Benchmarking FlapArenaEnv ({name})...")
        result = benchmark_env(name, num_steps=max(1, frames // 2))
        results.append(result)
        print(f"  Steps/sec: {result['steps_per_second']:.1f}")
        print()

    print("=" * 60)
    print("SUMMARY")
    print("=" * 60)
    print()
    print(f"{'Mode':<12} {'Profile':<10} {'Steps/s':>12} {'ms/step':>10}")
    print("-" * 48)
    for r in results:
        print(f"{r['mode']:<12} {r['difficulty']:<10} {r['steps_per_second']:>12.1f} {r['ms_per_step']:>10.3f}")

    return results


def main():
    parser = argparse.ArgumentParser(description="Benchmark flap arena performance")
    parser.add_argument("--frames", type=int, default=5000, help="Engine frames per benchmark")
    parser.add_argument("--difficulty", type=str, nargs="+", default=["easy", "hard", "crazy"],
                        help="Profiles to test")
    parser.add_argument("--quick", action="store_true", help="Quick benchmark (fewer frames)")

    args = parser.parse_args()
    frames = 500 if args.quick else args.frames
    run_all_benchmarks(args.difficulty, frames)
    return 0


if __name__ == "__main__":
    sys.exit(main())
