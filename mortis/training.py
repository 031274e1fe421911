"""Weight tuning with the covariance matrix adaptation evolution strategy."""

from __future__ import annotations

import math
import random
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TextIO

import numpy as np

from .agent import DEFAULT_MAX_PIECES, simulate_game
from .board import FEATURES

MEAN_LEARNING_RATE = 0.8
INITIAL_STEP_SIZE = 1.0
DEFAULT_POPULATION = 240
DEFAULT_GAMES = 100
STATUS_INTERVAL = 50


@dataclass(frozen=True)
class Individual:
    """A candidate point together with its objective value."""

    point: tuple[float, ...]
    value: float


class CMAES:
    """Ask/tell CMA-ES with positive recombination weights."""

    def __init__(
        self,
        mean: Sequence[float],
        sigma: float = INITIAL_STEP_SIZE,
        population_size: int = DEFAULT_POPULATION,
        maximize: bool = True,
        seed: int | None = None,
    ) -> None:
        self.mean = np.array(mean, dtype=float)
        if self.mean.ndim != 1 or self.mean.size == 0:
            raise ValueError("mean must be a non-empty vector")
        if sigma <= 0:
            raise ValueError("sigma must be positive")
        if population_size < 2:
            raise ValueError("population size must be at least 2")

        n = self.mean.size
        self.dimension = n
        self.sigma = float(sigma)
        self.population_size = population_size
        self.maximize = maximize
        self.generation = 0
        self.current_best: Individual | None = None
        self._best: Individual | None = None
        self._rng = np.random.default_rng(seed)

        mu = population_size // 2
        raw = np.log(mu + 0.5) - np.log(np.arange(1, mu + 1))
        self._mu = mu
        self._weights = raw / raw.sum()
        mueff = 1.0 / float(np.sum(self._weights**2))
        self._mueff = mueff

        self._cc = (4 + mueff / n) / (n + 4 + 2 * mueff / n)
        self._cs = (mueff + 2) / (n + mueff + 5)
        self._c1 = 2 / ((n + 1.3) ** 2 + mueff)
        self._cmu = min(1 - self._c1, 2 * (mueff - 2 + 1 / mueff) / ((n + 2) ** 2 + mueff))
        self._damps = 1 + 2 * max(0.0, math.sqrt((mueff - 1) / (n + 1)) - 1) + self._cs
        self._chi_n = math.sqrt(n) * (1 - 1 / (4 * n) + 1 / (21 * n * n))

        self._pc = np.zeros(n)
        self._ps = np.zeros(n)
        self._cov = np.eye(n)
        self._update_eigen()

    def _update_eigen(self) -> None:
        self._cov = (self._cov + self._cov.T) / 2
        eigvals, basis = np.linalg.eigh(self._cov)
        scales = np.sqrt(np.maximum(eigvals, 1e-20))
        self._basis = basis
        self._scales = scales
        self._inv_sqrt_cov = basis @ np.diag(1 / scales) @ basis.T

    def _better(self, a: float, b: float) -> bool:
        return a > b if self.maximize else a < b

    def ask(self) -> list[np.ndarray]:
        """Sample a new population around the current mean."""
        z = self._rng.standard_normal((self.population_size, self.dimension))
        steps = (z * self._scales) @ self._basis.T
        return [self.mean + self.sigma * step for step in steps]

    def tell(self, points: Sequence[Sequence[float]], values: Sequence[float]) -> Individual:
        """Update the distribution from evaluated points; return this generation's best."""
        xs = np.asarray(points, dtype=float)
        vals = np.asarray(values, dtype=float)
        if xs.shape != (self.population_size, self.dimension) or vals.shape != (
            self.population_size,
        ):
            raise ValueError("points and values must match the population size and dimension")

        keys = -vals if self.maximize else vals.copy()
        keys[np.isnan(keys)] = np.inf
        order = np.argsort(keys, kind="stable")

        top = int(order[0])
        current = Individual(tuple(float(v) for v in xs[top]), float(vals[top]))
        self.current_best = current
        if self._best is None or self._better(current.value, self._best.value):
            self._best = current

        n = self.dimension
        selected = xs[order[: self._mu]]
        ys = (selected - self.mean) / self.sigma
        y_w = self._weights @ ys
        self.mean = self.mean + MEAN_LEARNING_RATE * self.sigma * y_w

        cs, cc, mueff = self._cs, self._cc, self._mueff
        self._ps = (1 - cs) * self._ps + math.sqrt(cs * (2 - cs) * mueff) * (
            self._inv_sqrt_cov @ y_w
        )
        generation = self.generation + 1
        ps_norm = float(np.linalg.norm(self._ps))
        hsig = (
            ps_norm / math.sqrt(1 - (1 - cs) ** (2 * generation)) / self._chi_n
            < 1.4 + 2 / (n + 1)
        )
        self._pc = (1 - cc) * self._pc + (
            math.sqrt(cc * (2 - cc) * mueff) * y_w if hsig else 0.0
        )

        rank_mu = (ys.T * self._weights) @ ys
        correction = 0.0 if hsig else cc * (2 - cc)
        self._cov = (
            (1 - self._c1 - self._cmu) * self._cov
            + self._c1 * (np.outer(self._pc, self._pc) + correction * self._cov)
            + self._cmu * rank_mu
        )
        self.sigma *= math.exp(min(1.0, (cs / self._damps) * (ps_norm / self._chi_n - 1)))
        self.generation = generation
        self._update_eigen()
        return current

    def best(self) -> Individual | None:
        """The best individual seen so far, or ``None`` before the first tell."""
        return self._best


def normalize(weights: Sequence[float]) -> tuple[float, ...]:
    """Scale the weights to unit Euclidean length (a zero vector stays as is)."""
    values = tuple(float(w) for w in weights)
    norm = math.sqrt(sum(w * w for w in values))
    if norm > 0.0:
        return tuple(w / norm for w in values)
    return values


def objective(
    weights: Sequence[float],
    num_games: int = DEFAULT_GAMES,
    rng: random.Random | None = None,
    max_pieces: int = DEFAULT_MAX_PIECES,
) -> float:
    """Mean score over ``num_games`` games played with the normalised weights."""
    if num_games <= 0:
        raise ValueError("num_games must be positive")
    rng = rng if rng is not None else random.Random()
    unit = normalize(weights)
    total = sum(simulate_game(unit, rng, max_pieces) for _ in range(num_games))
    return total / num_games


def format_results(best: Individual) -> str:
    """Human-readable summary of the best score and its weight vector."""
    weights = ", ".join(f"{w:.6f}" for w in best.point)
    return f"最佳分数: {best.value:.2f}\n最佳权重数组形式:\n[{weights}]"


def train(
    generations: int = 20,
    target: float = 1_000_000.0,
    population_size: int = DEFAULT_POPULATION,
    num_games: int = DEFAULT_GAMES,
    max_pieces: int = DEFAULT_MAX_PIECES,
    seed: int | None = None,
    out: TextIO | None = None,
) -> Individual | None:
    """Search for feature weights maximising the mean game score.

    Stops after ``generations`` generations, once the best mean score exceeds
    ``target``, or on Ctrl+C. Returns the best individual of the last
    generation that finished.
    """
    out = out if out is not None else sys.stdout

    def emit(text: str) -> None:
        print(text, file=out, flush=True)

    emit("开始使用CMAES训练俄罗斯方块AI参数...")
    rng = random.Random(seed)
    strategy = CMAES([0.0] * FEATURES, INITIAL_STEP_SIZE, population_size, True, seed)
    emit(f"正在运行CMAES优化, 总共{generations}代...")

    result: Individual | None = None
    try:
        while strategy.generation < generations:
            points = strategy.ask()
            values = [objective(point, num_games, rng, max_pieces) for point in points]
            result = strategy.tell(points, values)
            overall = strategy.best()
            if strategy.generation % STATUS_INTERVAL == 0:
                emit(
                    f"generation {strategy.generation}: "
                    f"best {overall.value:.2f}, sigma {strategy.sigma:.4g}"
                )
            if overall is not None and overall.value > target:
                break
    except KeyboardInterrupt:
        emit("\n接收到Ctrl+C, 正在结束训练...")
        result = strategy.current_best

    emit("优化完成！")
    if result is not None:
        emit(format_results(result))
    return result