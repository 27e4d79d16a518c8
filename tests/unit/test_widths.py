import math

import numpy as np
import pytest
from structlog.testing import capture_logs

from almost.config import ComparisonConfig, configure, get_config
from almost.exceptions import ToleranceError, UnsupportedFloatTypeError
from almost.widths import (
    F32_EPSILON,
    F32_TOLERANCE,
    F64_EPSILON,
    F64_TOLERANCE,
    FLOAT32,
    FLOAT64,
    AlmostEqual,
    comparator_for,
)

requires_debug = pytest.mark.skipif(not __debug__, reason="contract checks are disabled under python -O")


@pytest.fixture
def contracts_disabled():
    previous = get_config()
    configure(ComparisonConfig(check_contracts=False))
    yield
    configure(previous)


def test_machine_epsilon():
    assert F64_EPSILON == 2.0**-52
    assert F32_EPSILON == np.float32(2.0**-23)
    assert FLOAT64.machine_epsilon == F64_EPSILON
    assert FLOAT32.machine_epsilon == F32_EPSILON


def test_default_tolerance_is_sqrt_epsilon():
    assert F64_TOLERANCE == math.sqrt(F64_EPSILON)
    assert abs(float(F32_TOLERANCE) - 2.0**-11.5) < 1e-10
    assert FLOAT64.default_tolerance == F64_TOLERANCE
    assert FLOAT32.default_tolerance == F32_TOLERANCE
    assert type(FLOAT32.default_tolerance) is np.float32


def test_comparators_implement_capability():
    assert isinstance(FLOAT32, AlmostEqual)
    assert isinstance(FLOAT64, AlmostEqual)
    assert repr(FLOAT32) == "FloatComparator(float32)"


def test_comparator_methods():
    assert FLOAT64.almost_equals(0.1 + 0.2, 0.3)
    assert FLOAT64.almost_zero(1e-9)
    assert FLOAT64.almost_equals_with(100.0, 101.0, 0.02)
    assert FLOAT64.almost_equals_with(100.0, 103.0, 0.02) is False
    assert FLOAT32.almost_zero_with(np.float32(1e-3), np.float32(1e-2))
    assert FLOAT32.almost_equals(np.float32(1.0), np.float32(1.0001))


def test_float32_comparator_rounds_python_floats_to_float32():
    # Two float64 values that collapse onto the same float32.
    assert FLOAT32.almost_equals_with(1.0, 1.0 + 2.0**-30, F32_EPSILON)
    assert FLOAT32.almost_equals_with(1e300, math.inf, F32_EPSILON)


def test_comparator_for_python_floats():
    assert comparator_for(1.0) is FLOAT64
    assert comparator_for(1.0, 2.0) is FLOAT64
    assert comparator_for(np.float64(1.0)) is FLOAT64


def test_comparator_for_numpy_widths():
    assert comparator_for(np.float32(1.0)) is FLOAT32
    assert comparator_for(np.float32(1.0), 2.0) is FLOAT32
    assert comparator_for(2.0, np.float32(1.0)) is FLOAT32
    assert comparator_for(np.float32(1.0), np.float64(2.0)) is FLOAT64
    assert comparator_for(np.float16(1.0), np.float32(2.0)) is FLOAT32


def test_comparator_for_unsupported_width():
    with pytest.raises(UnsupportedFloatTypeError, match="float16"):
        comparator_for(np.float16(1.0))


@requires_debug
@pytest.mark.parametrize("tol", [1.0, 2.0, 1e-20, 0.0, -0.1, math.nan])
def test_relative_tolerance_contract(tol):
    with pytest.raises(ToleranceError):
        FLOAT64.almost_equals_with(1.0, 1.0, tol)


@requires_debug
def test_relative_tolerance_contract_float32():
    with pytest.raises(ToleranceError, match="machine epsilon"):
        FLOAT32.almost_equals_with(np.float32(1.0), np.float32(1.0), F32_EPSILON / np.float32(2.0))
    # float64 epsilon is a valid float64 tolerance but too small for float32.
    assert FLOAT64.almost_equals_with(1.0, 1.0, F64_EPSILON)
    with pytest.raises(ToleranceError):
        FLOAT32.almost_equals_with(np.float32(1.0), np.float32(1.0), F64_EPSILON)


@requires_debug
@pytest.mark.parametrize("tol", [0.0, -1.0, math.nan])
def test_absolute_tolerance_contract(tol):
    with pytest.raises(ToleranceError, match="must be positive"):
        FLOAT64.almost_zero_with(0.0, tol)


@requires_debug
def test_tolerance_error_is_value_error():
    with pytest.raises(ValueError) as exc_info:
        FLOAT64.almost_equals_with(1.0, 1.0, 1.5)
    err = exc_info.value
    assert isinstance(err, ToleranceError)
    assert err.tolerance == 1.5
    assert "less than 1.0" in err.reason


@requires_debug
def test_contract_violation_is_logged():
    with capture_logs() as logs:
        with pytest.raises(ToleranceError):
            FLOAT64.almost_zero_with(1.0, -1.0)
    assert logs[0]["event"] == "Tolerance contract violated"
    assert logs[0]["log_level"] == "error"
    assert logs[0]["tolerance"] == -1.0
    assert logs[0]["width"] == 64


def test_contracts_can_be_disabled(contracts_disabled):
    assert FLOAT64.almost_equals_with(1.0, 1.5, 2.0)
    assert FLOAT64.almost_zero_with(0.0, 0.0) is False
    assert FLOAT32.almost_equals_with(np.float32(1.0), np.float32(1.0), 0.0) is False
