"""
Тесты для Liquidity Model: b(Q) = b0 * exp(alpha * Q)
"""

import pytest

from ls_lmsr.core.math.fixed_point import UNIT, fixed_exp
from ls_lmsr.core.math.liquidity import compute_b, liquidity_exponent

B0 = 100 * UNIT
ALPHA = UNIT // 100  # 0.01


class TestComputeB:
    """Тесты compute_b"""

    def test_zero_volume_returns_b0(self) -> None:
        """b(0) == b0"""
        assert compute_b(B0, ALPHA, 0) == B0

    @pytest.mark.parametrize("volume", [0, UNIT, 1_000 * UNIT, 10**30])
    def test_zero_alpha_is_constant(self, volume: int) -> None:
        """alpha == 0 → b не зависит от объёма"""
        assert compute_b(B0, 0, volume) == B0

    def test_formula(self) -> None:
        """b = b0 * exp(alpha * Q) в fixed-point"""
        volume = 10 * UNIT
        assert liquidity_exponent(ALPHA, volume) == UNIT // 10
        assert compute_b(B0, ALPHA, volume) == B0 * fixed_exp(UNIT // 10) // UNIT

    def test_monotonic_in_volume(self) -> None:
        """b не убывает с ростом объёма"""
        volumes = [0, UNIT, 10 * UNIT, 15 * UNIT, 100 * UNIT, 1_000 * UNIT]
        values = [compute_b(B0, ALPHA, v) for v in volumes]
        assert values == sorted(values)
        assert values[-1] > values[0]

    def test_huge_volume_saturates_without_error(self) -> None:
        """Огромный объём не ломает расчёт"""
        assert compute_b(B0, UNIT, 10**6 * UNIT) > B0

    def test_invalid_parameters(self) -> None:
        """Параметры вне области определения"""
        with pytest.raises(ValueError, match="b0 must be positive"):
            compute_b(0, ALPHA, 0)
        with pytest.raises(ValueError, match="alpha must be non-negative"):
            compute_b(B0, -1, 0)
        with pytest.raises(ValueError, match="total_volume must be non-negative"):
            compute_b(B0, ALPHA, -1)
        with pytest.raises(TypeError):
            compute_b(100.0, ALPHA, 0)
