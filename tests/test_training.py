import io
import math
import random

import numpy as np
import pytest

from mortis.board import FEATURES, WEIGHTS
from mortis.training import CMAES, Individual, format_results, normalize, objective, train


def test_normalize_gives_unit_length():
    unit = normalize(WEIGHTS)
    assert math.isclose(math.sqrt(sum(w * w for w in unit)), 1.0)
    assert all((a > 0) == (b > 0) for a, b in zip(unit, WEIGHTS))


def test_normalize_zero_vector_unchanged():
    assert normalize([0.0] * FEATURES) == (0.0,) * FEATURES


def test_normalize_is_scale_invariant():
    assert normalize(WEIGHTS) == normalize([2 * w for w in WEIGHTS])


def test_objective_is_scale_invariant_and_reproducible():
    doubled = [2 * w for w in WEIGHTS]
    a = objective(WEIGHTS, 2, random.Random(5), 30)
    b = objective(doubled, 2, random.Random(5), 30)
    c = objective(WEIGHTS, 2, random.Random(5), 30)
    assert a == b == c
    assert a >= 0


def test_objective_rejects_no_games():
    with pytest.raises(ValueError):
        objective(WEIGHTS, 0, random.Random(0), 10)


def test_format_results():
    text = format_results(Individual((1.0, -2.5), 3.14159))
    assert text == "最佳分数: 3.14\n最佳权重数组形式:\n[1.000000, -2.500000]"


def _run(es, fn, generations):
    seen = []
    for _ in range(generations):
        points = es.ask()
        values = [fn(p) for p in points]
        seen.extend(values)
        es.tell(points, values)
    return seen


def test_cmaes_minimizes_sphere():
    es = CMAES([3.0] * 4, 1.0, 12, False, seed=0)
    _run(es, lambda p: float(np.sum(np.asarray(p) ** 2)), 200)
    assert es.best().value < 1e-6
    assert np.allclose(es.mean, 0.0, atol=1e-2)


def test_cmaes_maximizes_negative_sphere():
    es = CMAES([-2.0, 4.0, 1.0], 0.5, 10, True, seed=1)
    _run(es, lambda p: -float(np.sum((np.asarray(p) - 1.0) ** 2)), 200)
    assert es.best().value > -1e-6


def test_cmaes_best_is_best_seen():
    es = CMAES([0.0, 0.0], 1.0, 6, True, seed=2)
    seen = _run(es, lambda p: float(p[0] - p[1] ** 2), 5)
    assert es.best().value == max(seen)
    assert es.generation == 5


def test_cmaes_seed_reproducible():
    a = CMAES([0.0] * 3, 1.0, 5, True, seed=9).ask()
    b = CMAES([0.0] * 3, 1.0, 5, True, seed=9).ask()
    assert len(a) == 5
    assert all(np.array_equal(x, y) for x, y in zip(a, b))


def test_cmaes_tell_shape_mismatch_raises():
    es = CMAES([0.0, 0.0], 1.0, 4, True, seed=0)
    points = es.ask()
    with pytest.raises(ValueError):
        es.tell(points[:3], [1.0, 2.0, 3.0])
    with pytest.raises(ValueError):
        es.tell(points, [1.0, 2.0])


def test_cmaes_invalid_arguments():
    with pytest.raises(ValueError):
        CMAES([0.0], 1.0, 1, True)
    with pytest.raises(ValueError):
        CMAES([0.0], 0.0, 4, True)
    with pytest.raises(ValueError):
        CMAES([], 1.0, 4, True)


def test_cmaes_best_before_tell_is_none():
    assert CMAES([0.0], 1.0, 4, True).best() is None


def test_train_small_run():
    out = io.StringIO()
    best = train(2, 1_000_000.0, 4, 1, 5, seed=3, out=out)
    text = out.getvalue()
    assert len(best.point) == FEATURES
    assert best.value >= 0
    assert "优化完成！" in text
    assert format_results(best) in text


def test_train_zero_generations_returns_none():
    out = io.StringIO()
    assert train(0, 1.0, 4, 1, 5, seed=0, out=out) is None
    assert "总共0代" in out.getvalue()