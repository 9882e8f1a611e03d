"""Tests for bytetracker.tracking.track."""

import pytest

from bytetracker.tracking import Detection, Track, TrackState


def make_detection(left=100.0, score=0.9, payload=None):
    return Detection.from_tlbr(left, 50, left + 40, 130, score, payload)


class TestTrack:
    """Tests for Track lifecycle."""

    @pytest.fixture
    def track(self):
        return Track(make_detection(payload='first'), frame_id=3, track_id=7)

    def test_new_track_is_tentative(self, track):
        assert track.track_id == 7
        assert track.state == TrackState.TENTATIVE
        assert not track.is_confirmed
        assert track.start_frame == 3
        assert track.end_frame == 3
        assert track.tracklet_len == 0
        assert track.payload == 'first'
        assert track.rect.left == pytest.approx(100.0)
        assert len(track.trajectory) == 1

    def test_update_confirms(self, track):
        track.predict()
        track.update(make_detection(left=102.0, score=0.7, payload='second'), frame_id=4)

        assert track.state == TrackState.TRACKED
        assert track.is_confirmed
        assert track.frame_id == 4
        assert track.tracklet_len == 1
        assert track.score == 0.7
        assert track.payload == 'second'
        assert len(track.trajectory) == 2
        assert 100.0 < track.predicted_rect.left < 102.0

    def test_age(self, track):
        assert track.age(3) == 0
        assert track.age(10) == 7

    def test_mark_as_lost_only_from_tracked(self, track):
        track.mark_as_lost()
        assert track.state == TrackState.TENTATIVE

        track.update(make_detection(), frame_id=4)
        track.mark_as_lost()
        assert track.state == TrackState.LOST
        assert track.is_confirmed

    def test_recover_from_lost(self, track):
        track.update(make_detection(), frame_id=4)
        track.mark_as_lost()
        track.predict()
        track.update(make_detection(), frame_id=6)

        assert track.state == TrackState.TRACKED
        assert track.frame_id == 6

    def test_mark_as_removed(self, track):
        track.mark_as_removed()
        assert track.state == TrackState.REMOVED

    def test_on_matched_hook(self):
        seen = []

        class CountingTrack(Track):
            def on_matched(self, detection):
                super().on_matched(detection)
                seen.append(detection.payload)

        track = CountingTrack(make_detection(payload=0), frame_id=1, track_id=1)
        track.update(make_detection(payload=1), frame_id=2)
        track.update(make_detection(payload=2), frame_id=3)

        assert seen == [1, 2]
        assert track.payload == 2

    def test_filter_kwargs(self):
        track = Track(make_detection(), 1, 1, {'std_weight_position': 0.1})
        assert track.kalman_filter.std_weight_position == 0.1

    def test_repr(self, track):
        assert repr(track) == 'Track(id=7, state=TENTATIVE, frames=3-3)'
