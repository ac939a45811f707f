"""Tests for the photo mode and the Slack uploader."""

from concurrent.futures import Executor, Future
from unittest.mock import Mock, patch

import pytest
import requests

from twisterfidget.constants import LedColor
from twisterfidget.exceptions import PhotoNotFoundError, PhotoRejectedError, PhotoUploadError
from twisterfidget.models import PhotoConfig
from twisterfidget.modes import PhotoMode
from twisterfidget.modes.photo import result_color
from twisterfidget.services import SlackPhotoUploader


class ImmediateExecutor(Executor):
    """Runs submitted work inline."""

    def submit(self, fn, *args, **kwargs):
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future


class DeferredExecutor(Executor):
    """Keeps futures pending until the test resolves them."""

    def __init__(self):
        self.futures: list[Future] = []

    def submit(self, fn, *args, **kwargs):
        future = Future()
        self.futures.append(future)
        return future


@pytest.fixture
def uploader():
    return Mock(spec=["upload"])


@pytest.mark.unit
class TestResultColor:
    """Test the outcome to LED color mapping."""

    def test_colors(self):
        assert result_color(None) == LedColor.GREEN
        assert result_color(PhotoNotFoundError(1, "/x/1.png")) == LedColor.YELLOW
        assert result_color(PhotoRejectedError(1, "invalid_auth")) == LedColor.PINK
        assert result_color(PhotoUploadError(1, "timeout")) == LedColor.RED
        assert result_color(RuntimeError("boom")) == LedColor.RED


@pytest.mark.unit
class TestPhotoMode:
    """Test the photo mode against fake uploaders and executors."""

    def test_success_lights_green(self, activate, sink, scheduler, uploader):
        mode = PhotoMode(uploader, ImmediateExecutor())
        activate(mode)

        assert mode.handle_press(3) is True
        uploader.upload.assert_called_once_with(3)

        # Result is applied on the scheduler, not on the worker
        assert sink.value(3) == 0
        scheduler.run_pending()
        assert sink.value(3) == LedColor.GREEN
        assert mode.in_flight == set()

    @pytest.mark.parametrize(
        "error, color",
        [
            (PhotoNotFoundError(2, "/x/2.png"), LedColor.YELLOW),
            (PhotoRejectedError(2, "invalid_auth"), LedColor.PINK),
            (PhotoUploadError(2, "connection reset"), LedColor.RED),
        ],
    )
    def test_failures(self, activate, sink, scheduler, uploader, error, color):
        uploader.upload.side_effect = error
        mode = PhotoMode(uploader, ImmediateExecutor())
        activate(mode)

        mode.handle_press(2)
        scheduler.run_pending()
        assert sink.value(2) == color

    def test_duplicate_press_while_in_flight(self, activate, uploader):
        executor = DeferredExecutor()
        mode = PhotoMode(uploader, executor)
        activate(mode)

        mode.handle_press(4)
        mode.handle_press(4)
        assert len(executor.futures) == 1
        assert mode.in_flight == {4}

    def test_stale_result_dropped_after_deactivate(self, activate, sink, scheduler, uploader):
        executor = DeferredExecutor()
        mode = PhotoMode(uploader, executor)
        activate(mode)
        mode.handle_press(5)

        mode.deactivate()
        sink.reset()
        executor.futures[0].set_result(None)
        scheduler.run_pending()

        assert sink.writes == []

    def test_stale_result_dropped_after_reactivation(self, activate, sink, scheduler, uploader):
        executor = DeferredExecutor()
        mode = PhotoMode(uploader, executor)
        activate(mode)
        mode.handle_press(5)
        first_session = mode.session

        mode.deactivate()
        activate(mode)
        assert mode.session != first_session

        executor.futures[0].set_result(None)
        scheduler.run_pending()
        assert sink.value(5) == 0

    def test_turns_are_absorbed(self, activate, uploader):
        mode = PhotoMode(uploader, ImmediateExecutor())
        activate(mode)
        assert mode.handle_turn(1, 64) is True
        uploader.upload.assert_not_called()

    def test_without_uploader_lights_red(self, activate, sink):
        mode = PhotoMode()
        activate(mode)

        assert mode.handle_press(7) is True
        assert sink.value(7) == LedColor.RED

    def test_shutdown_leaves_injected_executor(self, uploader):
        executor = Mock(spec=Executor)
        mode = PhotoMode(uploader, executor)
        mode.shutdown()
        executor.shutdown.assert_not_called()


@pytest.mark.unit
class TestSlackPhotoUploader:
    """Test the HTTP upload with requests mocked out."""

    @pytest.fixture
    def image_dir(self, tmp_path):
        (tmp_path / "3.png").write_bytes(b"\x89PNG fake")
        return tmp_path

    def _response(self, ok=True, status=200, body=None):
        response = Mock()
        response.ok = ok
        response.status_code = status
        response.reason = "OK" if ok else "Bad Request"
        response.json.return_value = body if body is not None else {"ok": True}
        return response

    def test_requires_token(self, tmp_path):
        with pytest.raises(ValueError):
            SlackPhotoUploader("", tmp_path)

    def test_from_config(self, tmp_path):
        uploader = SlackPhotoUploader.from_config(PhotoConfig(token="xoxp-1", image_dir=tmp_path, timeout=5))
        assert uploader.image_path(2) == tmp_path / "2.png"
        assert uploader.timeout == 5

        with pytest.raises(ValueError):
            SlackPhotoUploader.from_config(PhotoConfig())

    def test_upload_success(self, image_dir):
        uploader = SlackPhotoUploader("xoxp-1", image_dir, api_url="https://example.test/setPhoto")

        with patch("twisterfidget.services.photo_upload.requests.post") as mock_post:
            mock_post.return_value = self._response()
            uploader.upload(3)

        args, kwargs = mock_post.call_args
        assert args[0] == "https://example.test/setPhoto"
        assert kwargs["headers"] == {"Authorization": "Bearer xoxp-1"}
        assert kwargs["files"]["image"][0] == "3.png"
        assert kwargs["timeout"] == 30.0

    def test_missing_image(self, image_dir):
        uploader = SlackPhotoUploader("xoxp-1", image_dir)
        with patch("twisterfidget.services.photo_upload.requests.post") as mock_post:
            with pytest.raises(PhotoNotFoundError):
                uploader.upload(9)
        mock_post.assert_not_called()

    def test_api_refusal(self, image_dir):
        uploader = SlackPhotoUploader("xoxp-1", image_dir)
        with patch("twisterfidget.services.photo_upload.requests.post") as mock_post:
            mock_post.return_value = self._response(body={"ok": False, "error": "invalid_auth"})
            with pytest.raises(PhotoRejectedError) as exc_info:
                uploader.upload(3)
        assert "invalid_auth" in exc_info.value.technical_message

    def test_http_error(self, image_dir):
        uploader = SlackPhotoUploader("xoxp-1", image_dir)
        with patch("twisterfidget.services.photo_upload.requests.post") as mock_post:
            mock_post.return_value = self._response(ok=False, status=500)
            with pytest.raises(PhotoRejectedError):
                uploader.upload(3)

    def test_network_failure(self, image_dir):
        uploader = SlackPhotoUploader("xoxp-1", image_dir)
        with patch("twisterfidget.services.photo_upload.requests.post") as mock_post:
            mock_post.side_effect = requests.exceptions.Timeout("slow")
            with pytest.raises(PhotoUploadError) as exc_info:
                uploader.upload(3)
        assert not isinstance(exc_info.value, PhotoRejectedError)
        assert exc_info.value.control == 3
