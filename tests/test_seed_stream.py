import pytest
from engine.seed_stream import SeedStream, MBIG
from engine.numeric import wrap_i32, round_half_away, to_i32

def test_known_first_draws_seed_zero():
    rand = SeedStream(0)
    assert rand.next_f64() == pytest.approx(0.7262432699679598, abs=1e-12)
    assert rand.next_f64() == pytest.approx(0.8173253595909687, abs=1e-12)

def test_same_seed_same_sequence():
    a = SeedStream(12345)
    b = SeedStream(12345)
    assert [a.next_f64() for _ in range(50)] == [b.next_f64() for _ in range(50)]

def test_different_seeds_diverge():
    a = SeedStream(1)
    b = SeedStream(2)
    assert [a.next_f64() for _ in range(5)] != [b.next_f64() for _ in range(5)]

def test_negative_seed_uses_magnitude():
    a = SeedStream(-77)
    b = SeedStream(77)
    assert [a.next() for _ in range(10)] == [b.next() for _ in range(10)]

@pytest.mark.parametrize("seed", [0, 1, 42, 2147483646, 2147483647, -2147483647])
def test_draws_stay_in_unit_interval(seed):
    rand = SeedStream(seed)
    for _ in range(200):
        x = rand.next_f64()
        assert 0.0 <= x < 1.0
        s = rand.next_seed()
        assert 0 <= s < MBIG

def test_draws_are_side_effecting():
    # Consuming one draw shifts every later value
    a = SeedStream(9)
    b = SeedStream(9)
    b.next_f64()
    assert a.next_f64() != b.next_f64()

def test_next_f32_matches_narrowed_double():
    a = SeedStream(5)
    b = SeedStream(5)
    import numpy as np
    assert a.next_f32() == np.float32(b.next_f64())

def test_next_range_bounds():
    rand = SeedStream(3)
    values = [rand.next_range(2, 6) for _ in range(100)]
    assert min(values) >= 2
    assert max(values) < 6

def test_wrap_i32():
    assert wrap_i32(2 ** 31) == -(2 ** 31)
    assert wrap_i32(-(2 ** 31) - 1) == 2 ** 31 - 1
    assert wrap_i32(123) == 123

def test_round_half_away_from_zero():
    assert round_half_away(0.5) == 1.0
    assert round_half_away(2.5) == 3.0
    assert round_half_away(-2.5) == -3.0
    assert round_half_away(1.49) == 1.0

def test_to_i32_saturates():
    assert to_i32(1e12) == 2 ** 31 - 1
    assert to_i32(-1e12) == -(2 ** 31)
    assert to_i32(float("nan")) == 0
    assert to_i32(-3.7) == -3

def test_next_returns_raw_integer_sample():
    rand = SeedStream(0)
    assert rand.next() == 1559595546

@pytest.mark.parametrize("seed", [106, 213, 927, 1153, 1262])
def test_next_does_not_round_trip_through_double(seed):
    # These seeds draw integers that the scaled double would truncate one low
    raw = SeedStream(seed).next()
    assert raw == round(SeedStream(seed).next_f64() * MBIG)

def test_child_seed_is_exact():
    rand = SeedStream(249)
    rand.next_seed()
    assert rand.next_seed() == 1886695680
