import pytest

from slider_bridge.detector import ChangeDetector
from slider_bridge.models import SliderMoveEvent


def _pairs(events):
    return [(e.slider_id, e.percent_value) for e in events]


@pytest.fixture
def detector():
    return ChangeDetector()


class TestChangeDetector:
    def test_first_vector_emits_every_slider(self, detector):
        events = detector.process([0, 512, 1023])
        assert _pairs(events) == [(0, 0.0), (1, 0.5), (2, 1.0)]
        assert detector.known_slider_count == 3
        assert detector.values() == [0.0, 0.5, 1.0]

    def test_repeated_vector_emits_nothing(self, detector):
        detector.process([100, 200, 300])
        assert detector.process([100, 200, 300]) == []

    def test_noise_threshold(self, detector):
        detector.process([512], noise_reduction_level=0.025)
        # 532 -> 0.52, within 0.025 of 0.50
        assert detector.process([532], noise_reduction_level=0.025) == []
        # 543 -> 0.53, more than 0.025 away
        events = detector.process([543], noise_reduction_level=0.025)
        assert events == [SliderMoveEvent(slider_id=0, percent_value=0.53)]
        assert detector.values() == [0.53]

    def test_noise_compares_against_last_reported_value(self, detector):
        detector.process([512], noise_reduction_level=0.025)
        # creeping by small steps never adds up, since 0.50 stays the reference
        assert detector.process([532], noise_reduction_level=0.025) == []
        assert detector.process([522], noise_reduction_level=0.025) == []
        assert detector.values() == [0.5]

    def test_slider_count_change_resets_everything(self, detector):
        detector.process([0, 0])
        events = detector.process([0, 0, 0])
        assert _pairs(events) == [(0, 0.0), (1, 0.0), (2, 0.0)]
        assert detector.known_slider_count == 3

    def test_malformed_first_reading_is_ignored(self, detector):
        detector.process([512, 512])

        assert detector.process([1024, 0]) == []
        assert detector.process([4558, 925, 41]) == []
        assert detector.known_slider_count == 2
        assert detector.values() == [0.5, 0.5]

    def test_malformed_first_reading_before_any_data(self, detector):
        assert detector.process([2000, 10]) == []
        assert detector.known_slider_count == 0

    def test_unclamped_reading_after_first_slider(self, detector):
        # only the first reading is sanity checked; later ones pass through unclamped
        events = detector.process([0, 1200])
        assert _pairs(events) == [(0, 0.0), (1, 1.17)]

    def test_inverted_sliders(self, detector):
        events = detector.process([0, 256, 1023], invert=True)
        assert _pairs(events) == [(0, 1.0), (1, 0.75), (2, 0.0)]

    def test_reset_forces_full_snapshot(self, detector):
        detector.process([100, 200])
        assert detector.process([100, 200]) == []

        detector.reset_slider_count()
        events = detector.process([100, 200])
        assert [e.slider_id for e in events] == [0, 1]

    def test_empty_vector(self, detector):
        detector.process([100])
        assert detector.process([]) == []
        assert detector.known_slider_count == 0
        # sliders coming back are reported again
        assert len(detector.process([100])) == 1

    def test_events_in_ascending_index_order(self, detector):
        detector.process([0, 0, 0, 0])
        events = detector.process([0, 512, 0, 1023])
        assert _pairs(events) == [(1, 0.5), (3, 1.0)]
