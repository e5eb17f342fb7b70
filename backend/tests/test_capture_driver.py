"""Tests for the capture loop."""

import threading

import pytest

from summary_video.models import EncodingError, GenerationCancelled
from summary_video.services.capture_driver import (
    CancellationToken,
    CaptureDriver,
    background_sources,
    segment_at,
)
from summary_video.services.segment_planner import SegmentPlanner

from conftest import FakeRecorder, TrackingLoader, audio_of, simple_segments


class ThreadRecordingRecorder(FakeRecorder):
    """Registra a thread em que o mux final roda."""

    def finalize(self, audio_path=None):
        self.finalize_thread = threading.get_ident()
        return super().finalize(audio_path)


class RecorderBox:
    """Guarda o gravador criado pela factory."""

    def __init__(self, fail_at=None, recorder_class=FakeRecorder):
        self.fail_at = fail_at
        self.recorder_class = recorder_class
        self.recorder = None

    def __call__(self, path):
        self.recorder = self.recorder_class(path, fail_at=self.fail_at)
        return self.recorder


def make_driver(config, tmp_path, box, yields=None, loader=None):
    async def count_yield():
        if yields is not None:
            yields.append(1)

    return CaptureDriver(
        config,
        loader,
        output_dir=str(tmp_path),
        recorder_factory=box,
        yield_to_host=count_yield,
        seed=1,
    )


class TestCaptureLoop:

    async def test_sixty_seconds_at_thirty_fps(self, video, summary, small_config, tmp_path):
        box = RecorderBox()
        yields = []
        progress = []
        driver = make_driver(small_config, tmp_path, box, yields)

        artifact = await driver.capture(
            video, summary, simple_segments(60), audio_of(60),
            backgrounds={},
            progress_callback=lambda frame, total: progress.append((frame, total)),
            job_id="job1",
        )

        assert box.recorder.frames == 1800
        assert box.recorder.frame_sizes == {32 * 18 * 3}
        assert box.recorder.finalized
        assert not box.recorder.aborted
        assert len(yields) == 1800
        assert progress[-1] == (1800, 1800)
        assert artifact.duration == 60
        assert artifact.download_handle == f"/outputs/summary_{video.id}_job1.mp4"
        assert artifact.artifact_handle.startswith("file://")
        assert artifact.thumbnail_handle == video.thumbnail

    async def test_fractional_duration_rounds_frames_up(self, video, summary, small_config, tmp_path):
        box = RecorderBox()
        driver = make_driver(small_config, tmp_path, box)

        await driver.capture(video, summary, simple_segments(1.01, 1), audio_of(1.01), backgrounds={})

        assert box.recorder.frames == 31

    async def test_planned_timeline(self, video, summary, small_config, tmp_path):
        box = RecorderBox()
        driver = make_driver(small_config, tmp_path, box)
        segments = SegmentPlanner(use_thumbnail_variants=False).plan(video, summary, 2)

        artifact = await driver.capture(
            video, summary, segments, audio_of(2), backgrounds={video.thumbnail: None}
        )

        assert box.recorder.frames == 60
        assert len(artifact.segments) == 7
        assert artifact.source_frames == [video.thumbnail]


    async def test_finalize_runs_off_event_loop_thread(self, video, summary, small_config, tmp_path):
        box = RecorderBox(recorder_class=ThreadRecordingRecorder)
        driver = make_driver(small_config, tmp_path, box)

        await driver.capture(video, summary, simple_segments(1), audio_of(1), backgrounds={})

        assert box.recorder.finalized
        assert box.recorder.finalize_thread != threading.get_ident()

class TestCaptureFailures:

    async def test_cancellation_releases_recorder(self, video, summary, small_config, tmp_path):
        box = RecorderBox()
        cancel = CancellationToken()
        driver = make_driver(small_config, tmp_path, box)

        def stop_after_ten(frame, total):
            if frame == 10:
                cancel.cancel()

        with pytest.raises(GenerationCancelled):
            await driver.capture(
                video, summary, simple_segments(5), audio_of(5),
                cancel=cancel, backgrounds={}, progress_callback=stop_after_ten,
            )

        assert box.recorder.frames == 10
        assert box.recorder.aborted
        assert not box.recorder.finalized

    async def test_encoding_error_releases_recorder(self, video, summary, small_config, tmp_path):
        box = RecorderBox(fail_at=5)
        driver = make_driver(small_config, tmp_path, box)

        with pytest.raises(EncodingError):
            await driver.capture(video, summary, simple_segments(5), audio_of(5), backgrounds={})

        assert box.recorder.frames == 5
        assert box.recorder.aborted
        assert not box.recorder.finalized


class TestHelpers:

    def test_segment_at(self):
        segments = simple_segments(10, 2)
        assert segment_at(segments, 0) == 0
        assert segment_at(segments, 4.99) == 0
        assert segment_at(segments, 5) == 1
        assert segment_at(segments, 42) == 1

    def test_background_sources_are_unique(self, video, summary):
        segments = SegmentPlanner(use_thumbnail_variants=False).plan(video, summary, 60)
        assert background_sources(segments) == [video.thumbnail]

    def test_frame_count(self):
        assert CaptureDriver._frame_count(60, 30) == 1800
        assert CaptureDriver._frame_count(0.01, 30) == 1


class TestBackgroundRelease:

    async def test_loaded_images_closed_after_capture(self, video, summary, small_config, tmp_path):
        loader = TrackingLoader()
        driver = make_driver(small_config, tmp_path, RecorderBox(), loader=loader)
        segments = SegmentPlanner(use_thumbnail_variants=False).plan(video, summary, 1)

        artifact = await driver.capture(video, summary, segments, audio_of(1))

        assert loader.closed == [video.thumbnail]
        assert artifact.source_frames == [video.thumbnail]

    async def test_loaded_images_closed_after_failure(self, video, summary, small_config, tmp_path):
        loader = TrackingLoader()
        driver = make_driver(small_config, tmp_path, RecorderBox(fail_at=3), loader=loader)
        segments = SegmentPlanner(use_thumbnail_variants=False).plan(video, summary, 1)

        with pytest.raises(EncodingError):
            await driver.capture(video, summary, segments, audio_of(1))

        assert loader.closed == [video.thumbnail]

    async def test_caller_images_left_open(self, video, summary, small_config, tmp_path):
        loader = TrackingLoader()
        backgrounds = await loader.load_all([video.thumbnail])
        driver = make_driver(small_config, tmp_path, RecorderBox(), loader=loader)
        segments = SegmentPlanner(use_thumbnail_variants=False).plan(video, summary, 1)

        await driver.capture(video, summary, segments, audio_of(1), backgrounds=backgrounds)

        assert loader.closed == []
