"""Tests for the ffmpeg recorder lifecycle (ffmpeg itself is faked)."""

import io
from pathlib import Path

import pytest

from summary_video.models import EncodingError
from summary_video.models.config import RenderConfig, Resolution
from summary_video.services import frame_recorder
from summary_video.services.frame_recorder import FFmpegRecorder


class BrokenStdin(io.BytesIO):

    def write(self, data):
        raise BrokenPipeError("ffmpeg went away")


class FakeProcess:
    """Processo ffmpeg falso: grava o arquivo de saída ao terminar."""

    stdin_class = io.BytesIO

    def __init__(self, cmd, stdin=None, stdout=None, stderr=None):
        self.cmd = cmd
        self.stdin = self.stdin_class()
        self.returncode = None
        self.killed = False
        self.output = Path(cmd[-1])

    def poll(self):
        return self.returncode

    def wait(self, timeout=None):
        if self.returncode is None:
            self.output.write_bytes(b"mp4")
            self.returncode = 0
        return self.returncode

    def kill(self):
        self.killed = True
        self.returncode = -9


class BrokenProcess(FakeProcess):
    stdin_class = BrokenStdin


def small_render():
    return RenderConfig(resolution=Resolution(width=16, height=16), fps=10)


@pytest.fixture
def fake_ffmpeg(monkeypatch):
    processes = []

    def popen(cmd, **kwargs):
        process = FakeProcess(cmd, **kwargs)
        processes.append(process)
        return process

    monkeypatch.setattr(frame_recorder.subprocess, "Popen", popen)
    return processes


class TestRecorderLifecycle:

    def test_missing_binary(self, tmp_path):
        config = RenderConfig(ffmpeg_binary="/nonexistent/ffmpeg")
        recorder = FFmpegRecorder(config, tmp_path / "out.mp4")

        with pytest.raises(EncodingError):
            recorder.start()

    def test_write_before_start(self, tmp_path):
        recorder = FFmpegRecorder(small_render(), tmp_path / "out.mp4")
        with pytest.raises(EncodingError):
            recorder.write_frame(b"\x00" * 16 * 16 * 3)

    def test_command_reads_raw_rgb(self, tmp_path, fake_ffmpeg):
        recorder = FFmpegRecorder(small_render(), tmp_path / "out.mp4")
        recorder.start()

        cmd = fake_ffmpeg[0].cmd
        assert cmd[cmd.index("-f") + 1] == "rawvideo"
        assert cmd[cmd.index("-pix_fmt") + 1] == "rgb24"
        assert cmd[cmd.index("-s") + 1] == "16x16"
        assert cmd[cmd.index("-r") + 1] == "10"

    def test_rejects_wrong_frame_size(self, tmp_path, fake_ffmpeg):
        recorder = FFmpegRecorder(small_render(), tmp_path / "out.mp4")
        recorder.start()

        with pytest.raises(EncodingError):
            recorder.write_frame(b"\x00" * 10)

    def test_finalize_without_audio(self, tmp_path, fake_ffmpeg):
        recorder = FFmpegRecorder(small_render(), tmp_path / "out.mp4")
        recorder.start()
        recorder.write_frame(b"\x00" * recorder.frame_size)

        path = recorder.finalize()

        assert path == (tmp_path / "out.mp4").resolve()
        assert path.read_bytes() == b"mp4"
        assert not recorder.video_path.exists()
        assert recorder.frames_written == 1

    def test_finalize_with_missing_audio(self, tmp_path, fake_ffmpeg):
        recorder = FFmpegRecorder(small_render(), tmp_path / "out.mp4")
        recorder.start()

        with pytest.raises(EncodingError):
            recorder.finalize(str(tmp_path / "missing.mp3"))
        assert not recorder.video_path.exists()


class TestRecorderFailures:

    def test_broken_pipe(self, tmp_path, monkeypatch):
        monkeypatch.setattr(frame_recorder.subprocess, "Popen", BrokenProcess)
        recorder = FFmpegRecorder(small_render(), tmp_path / "out.mp4")
        recorder.start()

        with pytest.raises(EncodingError):
            recorder.write_frame(b"\x00" * recorder.frame_size)

    def test_abort_is_idempotent(self, tmp_path, fake_ffmpeg):
        recorder = FFmpegRecorder(small_render(), tmp_path / "out.mp4")
        recorder.start()

        recorder.abort()
        recorder.abort()

        assert fake_ffmpeg[0].killed
        assert not (tmp_path / "out.mp4").exists()

    def test_context_manager_aborts_on_error(self, tmp_path, fake_ffmpeg):
        with pytest.raises(RuntimeError):
            with FFmpegRecorder(small_render(), tmp_path / "out.mp4"):
                raise RuntimeError("render failed")

        assert fake_ffmpeg[0].killed
