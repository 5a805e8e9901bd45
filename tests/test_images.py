"""Tests for image placeholders, request_image and the httpx fetcher."""

import gc
from concurrent.futures import Future

import httpx
import pytest

from bbstyle import BBCode
from bbstyle.errors import ImageFetchError, PlaceholderError
from bbstyle.images import (
    HttpxImageFetcher,
    ImagePlaceholder,
    PlaceholderState,
    request_image,
)

PNG = b"\x89PNG\r\n\x1a\n"


class FakeFetcher:
    """Fetcher whose futures are completed by the test."""

    def __init__(self) -> None:
        self.futures: dict[str, Future[bytes]] = {}

    def fetch(self, url: str) -> Future[bytes]:
        future: Future[bytes] = Future()
        self.futures[url] = future
        return future


class RefusingFetcher:
    def fetch(self, url: str) -> Future[bytes]:
        raise ImageFetchError(url, "fetcher is closed")


class BrokenFetcher:
    def fetch(self, url: str) -> Future[bytes]:
        raise RuntimeError("worker pool gone")


class Dispatcher:
    """Collects callbacks so tests can run them later, like a UI loop."""

    def __init__(self) -> None:
        self.pending: list = []

    def __call__(self, callback) -> None:
        self.pending.append(callback)

    def run_all(self) -> None:
        callbacks, self.pending = self.pending, []
        for callback in callbacks:
            callback()


class TestImagePlaceholder:
    """Two-state PENDING -> READY cell."""

    def test_starts_pending(self) -> None:
        placeholder = ImagePlaceholder("https://x/a.png", pending="□")
        assert placeholder.state is PlaceholderState.PENDING
        assert placeholder.image is None
        assert placeholder.current == "□"

    def test_resolve(self) -> None:
        placeholder = ImagePlaceholder("https://x/a.png", pending="□")
        assert placeholder.resolve(PNG) is True
        assert placeholder.state is PlaceholderState.READY
        assert placeholder.current == PNG

    def test_run_id_stable_and_unique(self) -> None:
        a = ImagePlaceholder("https://x/a.png", pending="□")
        b = ImagePlaceholder("https://x/b.png", pending="□")
        run_id = a.run_id
        a.resolve(PNG)
        assert a.run_id == run_id
        assert a.run_id != b.run_id

    def test_listener_called_on_resolve(self) -> None:
        placeholder = ImagePlaceholder("https://x/a.png", pending="□")
        seen: list[ImagePlaceholder] = []
        placeholder.add_listener(seen.append)
        assert seen == []
        placeholder.resolve(PNG)
        assert seen == [placeholder]

    def test_late_listener_called_immediately(self) -> None:
        placeholder = ImagePlaceholder("https://x/a.png", pending="□")
        placeholder.resolve(PNG)
        seen: list[ImagePlaceholder] = []
        placeholder.add_listener(seen.append)
        assert seen == [placeholder]

    def test_discarded_ignores_result(self) -> None:
        placeholder = ImagePlaceholder("https://x/a.png", pending="□")
        seen: list[ImagePlaceholder] = []
        placeholder.add_listener(seen.append)
        placeholder.discard()
        assert placeholder.resolve(PNG) is False
        assert placeholder.state is PlaceholderState.PENDING
        assert seen == []

    def test_empty_image_raises(self) -> None:
        placeholder = ImagePlaceholder("https://x/a.png", pending="□")
        with pytest.raises(PlaceholderError, match="Empty image"):
            placeholder.resolve(b"")


class TestRequestImage:
    """Fetch wiring: dispatch, failure and cancellation."""

    def test_success_dispatched(self) -> None:
        fetcher, dispatch = FakeFetcher(), Dispatcher()
        placeholder = ImagePlaceholder("https://x/a.png", pending="□")
        request_image(placeholder, fetcher, dispatch)

        fetcher.futures["https://x/a.png"].set_result(PNG)
        # Not swapped until the renderer's thread runs the callback
        assert placeholder.state is PlaceholderState.PENDING
        dispatch.run_all()
        assert placeholder.state is PlaceholderState.READY

    def test_failure_stays_pending(self, caplog: pytest.LogCaptureFixture) -> None:
        fetcher, dispatch = FakeFetcher(), Dispatcher()
        placeholder = ImagePlaceholder("https://x/a.png", pending="□")
        request_image(placeholder, fetcher, dispatch)

        fetcher.futures["https://x/a.png"].set_exception(
            ImageFetchError("https://x/a.png", "unexpected response", 404)
        )
        assert dispatch.pending == []
        assert placeholder.state is PlaceholderState.PENDING
        assert "Image fetch failed" in caplog.text

    def test_refused_fetch(self) -> None:
        placeholder = ImagePlaceholder("https://x/a.png", pending="□")
        assert request_image(placeholder, RefusingFetcher(), Dispatcher()) is None
        assert placeholder.state is PlaceholderState.PENDING

    def test_unexpected_fetcher_error_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        placeholder = ImagePlaceholder("https://x/a.png", pending="□")
        assert request_image(placeholder, BrokenFetcher(), Dispatcher()) is None
        assert placeholder.state is PlaceholderState.PENDING
        assert "worker pool gone" in caplog.text

    def test_discarded_before_completion(self) -> None:
        fetcher, dispatch = FakeFetcher(), Dispatcher()
        placeholder = ImagePlaceholder("https://x/a.png", pending="□")
        request_image(placeholder, fetcher, dispatch)
        placeholder.discard()

        fetcher.futures["https://x/a.png"].set_result(PNG)
        assert dispatch.pending == []

    def test_discarded_between_completion_and_dispatch(self) -> None:
        fetcher, dispatch = FakeFetcher(), Dispatcher()
        placeholder = ImagePlaceholder("https://x/a.png", pending="□")
        request_image(placeholder, fetcher, dispatch)

        fetcher.futures["https://x/a.png"].set_result(PNG)
        placeholder.discard()
        dispatch.run_all()
        assert placeholder.state is PlaceholderState.PENDING

    def test_collected_placeholder_dropped(self) -> None:
        fetcher, dispatch = FakeFetcher(), Dispatcher()
        placeholder = ImagePlaceholder("https://x/a.png", pending="□")
        request_image(placeholder, fetcher, dispatch)
        del placeholder
        gc.collect()

        fetcher.futures["https://x/a.png"].set_result(PNG)
        assert dispatch.pending == []

    def test_cancelled_future_ignored(self) -> None:
        fetcher, dispatch = FakeFetcher(), Dispatcher()
        placeholder = ImagePlaceholder("https://x/a.png", pending="□")
        request_image(placeholder, fetcher, dispatch)

        assert fetcher.futures["https://x/a.png"].cancel()
        assert dispatch.pending == []
        assert placeholder.state is PlaceholderState.PENDING

    def test_empty_result_logged_not_raised(self, caplog: pytest.LogCaptureFixture) -> None:
        fetcher, dispatch = FakeFetcher(), Dispatcher()
        placeholder = ImagePlaceholder("https://x/a.png", pending="□")
        request_image(placeholder, fetcher, dispatch)

        fetcher.futures["https://x/a.png"].set_result(b"")
        dispatch.run_all()
        assert placeholder.state is PlaceholderState.PENDING
        assert "Empty image" in caplog.text


class TestParseWithFetcher:
    """Icons parsed with a configured fetcher."""

    def test_parse_does_not_wait(self) -> None:
        fetcher, dispatch = FakeFetcher(), Dispatcher()
        bb = BBCode(image_fetcher=fetcher, dispatch=dispatch)
        styled = bb("[icon]Bob[/icon] [eicon]wave[/eicon]")

        avatar, emote = styled.placeholders
        assert set(fetcher.futures) == {avatar.url, emote.url}
        assert avatar.state is PlaceholderState.PENDING

        fetcher.futures[emote.url].set_result(PNG)
        dispatch.run_all()
        assert emote.state is PlaceholderState.READY
        assert avatar.state is PlaceholderState.PENDING

    def test_broken_fetcher_does_not_fail_parse(self) -> None:
        styled = BBCode(image_fetcher=BrokenFetcher())("[icon]Bob[/icon]")
        assert styled.text == "Bob"
        (placeholder,) = styled.placeholders
        assert placeholder.state is PlaceholderState.PENDING

    def test_default_dispatch_runs_inline(self) -> None:
        fetcher = FakeFetcher()
        styled = BBCode(image_fetcher=fetcher)("[eicon]wave[/eicon]")
        (placeholder,) = styled.placeholders
        fetcher.futures[placeholder.url].set_result(PNG)
        assert placeholder.state is PlaceholderState.READY


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


class TestHttpxImageFetcher:
    """HTTP fetcher against a mock transport."""

    def test_fetch_image(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=PNG, headers={"content-type": "image/png"})

        with _client(handler) as client, HttpxImageFetcher(client=client) as fetcher:
            assert fetcher.fetch("https://x/a.png").result(timeout=5) == PNG

    def test_http_error_status(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404)

        with _client(handler) as client, HttpxImageFetcher(client=client) as fetcher:
            exc = fetcher.fetch("https://x/missing.png").exception(timeout=5)
        assert isinstance(exc, ImageFetchError)
        assert exc.status_code == 404
        assert exc.url == "https://x/missing.png"

    def test_non_image_content(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>", headers={"content-type": "text/html"})

        with _client(handler) as client, HttpxImageFetcher(client=client) as fetcher:
            exc = fetcher.fetch("https://x/a.png").exception(timeout=5)
        assert isinstance(exc, ImageFetchError)
        assert "not an image" in str(exc)

    def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("boom", request=request)

        with _client(handler) as client, HttpxImageFetcher(client=client) as fetcher:
            exc = fetcher.fetch("https://x/a.png").exception(timeout=5)
        assert isinstance(exc, ImageFetchError)
        assert exc.status_code is None

    def test_fetch_after_close(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=PNG)

        with _client(handler) as client:
            fetcher = HttpxImageFetcher(client=client)
            fetcher.close()
            with pytest.raises(ImageFetchError, match="closed"):
                fetcher.fetch("https://x/a.png")

    def test_end_to_end_with_parse(self) -> None:
        requested: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(str(request.url))
            return httpx.Response(200, content=PNG, headers={"content-type": "image/png"})

        with _client(handler) as client, HttpxImageFetcher(client=client) as fetcher:
            dispatch = Dispatcher()
            styled = BBCode(image_fetcher=fetcher, dispatch=dispatch)("[eicon]wave[/eicon]")
            (placeholder,) = styled.placeholders
            future = fetcher.fetch(placeholder.url)
            future.result(timeout=5)

        assert requested[0] == "https://static.f-list.net/images/eicon/wave.png"
