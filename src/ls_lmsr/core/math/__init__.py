"""
Core math modules для LS-LMSR

Детерминированная fixed-point арифметика и численно устойчивые примитивы
ценообразования без float.
"""

# Fixed-Point Math
from ls_lmsr.core.math.fixed_point import (
    # Constants
    EULER,
    EXP_INPUT_MAX,
    EXP_SATURATION,
    EXP_TERMS,
    LN2,
    LN_TERMS,
    UNIT,
    # Exceptions
    FixedPointDomainError,
    # Functions
    fixed_div,
    fixed_exp,
    fixed_ln,
    fixed_mul,
    from_fixed,
    to_fixed,
)

# Numerical Safeguards
from ls_lmsr.core.math.numerical_safeguards import (
    BPS,
    PPM,
    safe_div,
    validate_int,
    validate_non_negative,
    validate_positive,
)

# Liquidity Model
from ls_lmsr.core.math.liquidity import compute_b, liquidity_exponent

# Cost Function
from ls_lmsr.core.math.cost_function import (
    LogSumExpTerms,
    compute_cost,
    log_sum_exp_terms,
    required_funding,
)

# Price Oracle
from ls_lmsr.core.math.price_oracle import (
    compute_prices,
    price_sum_deviation,
    uniform_prices,
)

__all__ = [
    # Fixed-Point: Constants
    "EULER",
    "EXP_INPUT_MAX",
    "EXP_SATURATION",
    "EXP_TERMS",
    "LN2",
    "LN_TERMS",
    "UNIT",
    # Fixed-Point: Exceptions
    "FixedPointDomainError",
    # Fixed-Point: Functions
    "fixed_div",
    "fixed_exp",
    "fixed_ln",
    "fixed_mul",
    "from_fixed",
    "to_fixed",
    # Numerical Safeguards
    "BPS",
    "PPM",
    "safe_div",
    "validate_int",
    "validate_non_negative",
    "validate_positive",
    # Liquidity Model
    "compute_b",
    "liquidity_exponent",
    # Cost Function
    "LogSumExpTerms",
    "compute_cost",
    "log_sum_exp_terms",
    "required_funding",
    # Price Oracle
    "compute_prices",
    "price_sum_deviation",
    "uniform_prices",
]
