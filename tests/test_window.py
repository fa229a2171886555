"""Tests for the bounded sample window."""

import pytest

from pifan.errors import EmptyWindowError
from pifan.window import SampleWindow


class TestSampleWindowPush:
    @pytest.mark.parametrize("capacity, pushes", [(1, 4), (3, 2), (3, 3), (3, 7), (5, 12)])
    def test_keeps_last_min_k_n(self, capacity: int, pushes: int) -> None:
        window = SampleWindow(capacity)
        values = [float(v) for v in range(pushes)]
        for v in values:
            window.push(v)

        assert len(window) == min(pushes, capacity)
        assert window.samples == tuple(values[-min(pushes, capacity):])

    def test_oldest_first(self) -> None:
        window = SampleWindow(3)
        for v in (50.0, 51.0, 52.0, 53.0):
            window.push(v)
        assert window.samples == (51.0, 52.0, 53.0)

    def test_samples_is_a_copy(self) -> None:
        window = SampleWindow(2)
        window.push(40.0)
        snapshot = window.samples
        window.push(41.0)
        assert snapshot == (40.0,)

    def test_capacity_is_fixed(self) -> None:
        window = SampleWindow(3)
        for v in range(10):
            window.push(float(v))
        assert window.capacity == 3

    def test_zero_capacity_raises(self) -> None:
        with pytest.raises(ValueError, match="must be positive"):
            SampleWindow(0)


class TestSampleWindowAverage:
    def test_empty_raises(self) -> None:
        with pytest.raises(EmptyWindowError):
            SampleWindow(3).average()

    def test_single_sample(self) -> None:
        window = SampleWindow(3)
        window.push(47.5)
        assert window.average() == 47.5

    def test_partial_window(self) -> None:
        window = SampleWindow(3)
        window.push(40.0)
        window.push(50.0)
        assert window.average() == pytest.approx(45.0)

    def test_ignores_evicted_samples(self) -> None:
        window = SampleWindow(3)
        for v in (100.0, 40.0, 50.0, 60.0):
            window.push(v)
        assert window.average() == pytest.approx(50.0)
