"""Tests for the analysis session state machine."""

import pytest
from PIL import Image

from pixelscope.analysis.sampler import PixelBuffer
from pixelscope.errors import InvalidInput
from pixelscope.image.loader import load_pixel_buffer
from pixelscope.image.session import AnalysisSession, SessionStatus


@pytest.fixture
def image_path(tmp_path):
    path = tmp_path / "photo.png"
    Image.new("RGBA", (8, 4), (30, 60, 90, 255)).save(path)
    return path


class TestAnalysisSession:
    def test_starts_idle(self):
        assert AnalysisSession().status is SessionStatus.IDLE

    def test_successful_run_is_ready(self, image_path):
        session = AnalysisSession()

        state = session.run(image_path)

        assert state.status is SessionStatus.READY
        assert state.file_name == "photo.png"
        assert state.analysis.average_color.rgb == (30, 60, 90)
        assert state.message is None

    def test_rejected_file_is_error(self, tmp_path):
        path = tmp_path / "photo.bmp"
        Image.new("RGB", (2, 2)).save(path, format="BMP")
        session = AnalysisSession()

        state = session.run(path)

        assert state.status is SessionStatus.ERROR
        assert state.analysis is None
        assert "Unsupported" in state.message

    def test_invalid_buffer_is_error(self, image_path):
        session = AnalysisSession(loader=lambda path: PixelBuffer(2, 2, b"\x00"))

        state = session.run(image_path)

        assert state.status is SessionStatus.ERROR

    def test_engine_runs_once_per_load(self, image_path):
        calls = []

        def loader(path):
            calls.append(path)
            return PixelBuffer(1, 1, bytes([1, 2, 3, 255]))

        session = AnalysisSession(loader=loader)
        session.run(image_path)

        assert calls == [image_path]
        assert session.status is SessionStatus.READY

    def test_reset_returns_to_idle(self, image_path):
        session = AnalysisSession()
        session.run(image_path)

        state = session.reset()

        assert state.status is SessionStatus.IDLE
        assert state.analysis is None

    def test_concurrent_run_is_rejected(self, image_path):
        session = AnalysisSession()
        rejected = []

        def reentrant_loader(path):
            with pytest.raises(RuntimeError, match="already in progress"):
                session.run(path)
            rejected.append(path)
            return PixelBuffer(1, 1, bytes([1, 2, 3, 255]))

        session.loader = reentrant_loader
        state = session.run(image_path)

        assert rejected == [image_path]
        assert state.status is SessionStatus.READY

    def test_unexpected_loader_failure_is_error(self, image_path):
        def broken_loader(path):
            raise KeyError("decoder exploded")

        session = AnalysisSession(loader=broken_loader)

        state = session.run(image_path)

        assert state.status is SessionStatus.ERROR
        assert state.analysis is None
        assert state.message

    def test_session_recovers_after_unexpected_failure(self, image_path):
        session = AnalysisSession(loader=lambda path: 1 / 0)
        session.run(image_path)

        session.loader = load_pixel_buffer
        state = session.run(image_path)

        assert state.status is SessionStatus.READY

    def test_oversized_dimensions_are_error(self, tmp_path, monkeypatch):
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1_000)
        path = tmp_path / "huge.png"
        Image.new("1", (100, 100)).save(path)
        session = AnalysisSession()

        state = session.run(path)

        assert state.status is SessionStatus.ERROR
        assert "too large" in state.message
