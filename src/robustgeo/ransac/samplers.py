"""
Minimal-sample draw policies.

- UniformSampler: every draw is m distinct indices picked uniformly from N.
- ProsacSampler: progressive sampling (Chum & Matas, PROSAC). Samples are
  ranked by descending quality score and drawn from a growing prefix of that
  ranking, so the most trusted samples are tried first. Once the growth
  schedule is exhausted it degrades to uniform sampling.
"""

from __future__ import annotations

import math

import numpy as np

from .types import FloatArray, IntArray


class UniformSampler:
    def __init__(self, num_samples: int, sample_size: int):
        if sample_size < 1 or num_samples < sample_size:
            raise ValueError(f"Cannot draw {sample_size} out of {num_samples} samples")
        self.num_samples = int(num_samples)
        self.sample_size = int(sample_size)

    def draw(self, rng: np.random.Generator) -> IntArray:
        # unique indices, no replacement
        return rng.choice(self.num_samples, size=self.sample_size, replace=False)


def growth_function(num_samples: int, sample_size: int, max_iterations: int) -> list[int]:
    """
    PROSAC growth function g(t) = min{n : T'_n >= t}, stored as T'_n per subset size.

    Let T_N be the number of samples plain RANSAC would draw. The average
    number of those samples containing points from U_n only is

        T_n = T_N * prod_{i=0}^{m-1} (n - i) / (N - i)

    which satisfies T_{n+1} = (n + 1) / (n + 1 - m) * T_n, and

        T'_{n+1} = T'_n + ceil(T_{n+1} - T_n),   T'_m = 1
    """
    n_pts, m = int(num_samples), int(sample_size)
    t_n = float(max_iterations)
    for i in range(m):
        t_n *= (m - i) / (n_pts - i)

    growth = [0] * n_pts
    t_n_prime = 1
    for i in range(n_pts):
        if i + 1 <= m:
            growth[i] = t_n_prime
            continue
        t_n_plus1 = float(i + 1) * t_n / (i + 1 - m)
        growth[i] = t_n_prime + math.ceil(t_n_plus1 - t_n)
        t_n = t_n_plus1
        t_n_prime = growth[i]
    return growth


class ProsacSampler:
    """
    Draws from the top-n ranked samples, n growing with the draw count t.

    While t <= T'_n, each sample is m - 1 indices from the first n - 1 ranked
    samples plus the n-th ranked sample itself.
    """

    def __init__(self, quality_scores: FloatArray, sample_size: int, max_iterations: int):
        scores = np.asarray(quality_scores, dtype=np.float64)
        if scores.ndim != 1:
            raise ValueError(f"Expected quality scores shape (N,), got {scores.shape}")
        if sample_size < 1 or scores.shape[0] < sample_size:
            raise ValueError(f"Cannot draw {sample_size} out of {scores.shape[0]} samples")

        # stable so equal scores keep caller order
        self.order: IntArray = np.argsort(-scores, kind="stable")
        self.num_samples = int(scores.shape[0])
        self.sample_size = int(sample_size)
        self.max_iterations = int(max_iterations)
        self.growth = growth_function(self.num_samples, self.sample_size, self.max_iterations)

        self.kth_sample = 0
        self.subset_size = self.sample_size

    def draw(self, rng: np.random.Generator) -> IntArray:
        self.kth_sample += 1

        # Equivalent to RANSAC from here on
        if self.kth_sample > self.max_iterations:
            return rng.choice(self.num_samples, size=self.sample_size, replace=False)

        while self.subset_size < self.num_samples and self.kth_sample > self.growth[self.subset_size - 1]:
            self.subset_size += 1

        head = rng.choice(self.subset_size - 1, size=self.sample_size - 1, replace=False)
        ranked = np.append(head, self.subset_size - 1)
        return self.order[ranked]
