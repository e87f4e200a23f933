from pytest import approx

from particlelife.sim.core.rng import DeterministicRng


def test_unit_circle_vectors_are_unit_length_and_reproducible():
    first = DeterministicRng(7)
    second = DeterministicRng(7)

    for _ in range(20):
        a = first.next_unit_circle()
        b = second.next_unit_circle()
        assert a.length() == approx(1.0)
        assert a == b


def test_reset_replays_the_same_sequence():
    rng = DeterministicRng(3)
    draws = [rng.next_range(-1.0, 1.0), rng.next_int(4), rng.next_unit_circle()]

    rng.reset()

    assert [rng.next_range(-1.0, 1.0), rng.next_int(4), rng.next_unit_circle()] == draws
    assert rng.seed == 3
