"""Tests for the segment planner."""

import pytest

from summary_video.models import (
    Direction,
    InvalidDurationError,
    ProgressElement,
    ScaleIn,
    SegmentKind,
    SummaryResult,
    TextElement,
    TransitionType,
    Typewriter,
    Wave,
)
from summary_video.services.segment_planner import SegmentPlanner, bookend_duration


class TestPlanLayout:

    def test_five_points_sixty_seconds(self, video, summary):
        segments = SegmentPlanner().plan(video, summary, 60)

        assert len(segments) == 7
        assert segments[0].kind == SegmentKind.INTRO
        assert segments[-1].kind == SegmentKind.CONCLUSION
        assert segments[0].start == 0
        assert segments[0].end == pytest.approx(8.0)
        assert segments[1].duration == pytest.approx(8.8)
        assert segments[-1].start == pytest.approx(52.0)
        assert segments[-1].end == 60

    def test_segments_are_contiguous(self, video, summary):
        for total in (10, 37.3, 60, 119.9):
            segments = SegmentPlanner().plan(video, summary, total)
            for current, following in zip(segments, segments[1:]):
                assert current.end == following.start
            assert segments[-1].end == total

    def test_bookends_are_fifteen_percent_capped_at_eight(self):
        assert bookend_duration(10) == pytest.approx(1.5)
        assert bookend_duration(200) == 8.0

    def test_no_key_points(self, video):
        empty = SummaryResult(summary="nothing", key_points=[])
        segments = SegmentPlanner().plan(video, empty, 60)

        assert [s.kind for s in segments] == [SegmentKind.INTRO, SegmentKind.CONCLUSION]
        assert segments[1].start == segments[0].end
        assert segments[1].end == 60

    @pytest.mark.parametrize("total", [0, -5, float("inf"), float("nan"), 5e-324])
    def test_invalid_duration(self, video, summary, total):
        with pytest.raises(InvalidDurationError):
            SegmentPlanner().plan(video, summary, total)

    def test_deterministic(self, video, summary):
        planner = SegmentPlanner()
        assert planner.plan(video, summary, 45) == planner.plan(video, summary, 45)


class TestPlanContent:

    def test_intro_content(self, video, summary):
        intro = SegmentPlanner().plan(video, summary, 60)[0]
        element = intro.elements[0]

        assert intro.transitions[0].type == TransitionType.CROSSFADE
        assert intro.transitions[0].duration == 1.5
        assert isinstance(element, TextElement)
        assert element.content.subtitle == "by Deep Dives"
        assert element.content.badge == "10min → 60s AI Summary"

    def test_key_point_transitions_alternate(self, video, summary):
        key_points = SegmentPlanner().plan(video, summary, 60)[1:-1]

        types = [s.transitions[0].type for s in key_points]
        directions = [s.transitions[0].direction for s in key_points]
        assert types == [
            TransitionType.SLIDE, TransitionType.ZOOM, TransitionType.SLIDE,
            TransitionType.ZOOM, TransitionType.SLIDE,
        ]
        assert directions == [
            Direction.LEFT, Direction.RIGHT, Direction.UP, Direction.DOWN, Direction.LEFT,
        ]

    def test_key_point_animations_cycle(self, video, summary):
        key_points = SegmentPlanner().plan(video, summary, 60)[1:-1]
        animations = [s.elements[0].animation for s in key_points]

        assert isinstance(animations[0], Typewriter)
        assert isinstance(animations[1], Wave)
        assert animations[1].stagger == 0.05
        assert isinstance(animations[2], ScaleIn)
        assert isinstance(animations[3], Typewriter)

    def test_key_point_progress(self, video, summary):
        second = SegmentPlanner().plan(video, summary, 60)[2]
        progress = second.elements[1]

        assert isinstance(progress, ProgressElement)
        assert progress.content.current == 2
        assert progress.content.total == 5
        assert progress.content.percentage == pytest.approx(40)
        assert second.elements[0].content.topic == "scaling"

    def test_conclusion(self, video, summary):
        conclusion = SegmentPlanner().plan(video, summary, 60)[-1]

        assert conclusion.transitions[0].type == TransitionType.PARTICLE
        assert conclusion.elements[0].content.subtitle == "5 key insights covered"


class TestSourceFrames:

    def test_thumbnail_variants(self, video):
        frames = SegmentPlanner().source_frames(video)
        assert frames[0] == video.thumbnail
        assert frames[1] == f"https://img.youtube.com/vi/{video.id}/maxresdefault.jpg"
        assert len(frames) == 9

    def test_backgrounds_without_variants(self, video, summary):
        segments = SegmentPlanner(use_thumbnail_variants=False).plan(video, summary, 60)
        assert {s.background for s in segments} == {video.thumbnail}
