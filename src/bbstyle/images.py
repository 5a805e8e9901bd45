"""Image placeholders and the image-fetch collaborator.

Icon and emote runs carry an ImagePlaceholder: a two-state cell that starts
PENDING (showing a default glyph) and switches to READY once the image
bytes arrive. The parse never waits for the fetch.

Flow:
    1. The materializer creates the placeholder and calls request_image()
    2. request_image() asks the ImageFetcher for a Future
    3. On completion the swap is handed to the configured dispatch callable,
       which runs it on the renderer's thread
    4. A failed fetch leaves the placeholder PENDING for good

The completion callback only holds a weak reference to the placeholder. If
the view that owned it is gone (placeholder collected or discard()ed) the
result is dropped.

Thread Safety:
    ImagePlaceholder state changes are guarded by a lock. HttpxImageFetcher
    runs requests on its own worker threads and shares one httpx.Client,
    which is thread-safe.
"""

from __future__ import annotations

import itertools
import threading
import weakref
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from enum import Enum, auto
from typing import Any, Protocol

import httpx

from bbstyle.errors import ImageFetchError, PlaceholderError
from bbstyle.utils.logger import get_logger

logger = get_logger(__name__)

_run_ids = itertools.count(1)


class PlaceholderState(Enum):
    PENDING = auto()
    READY = auto()


class ImagePlaceholder:
    """Two-state image cell addressed by a stable run id.

    Attributes:
        run_id: Process-unique id, stable for the placeholder's lifetime
        url: Image URL being fetched
        pending: Glyph shown until the image is ready

    """

    __slots__ = (
        "run_id",
        "url",
        "pending",
        "_image",
        "_state",
        "_discarded",
        "_listeners",
        "_lock",
        "__weakref__",
    )

    def __init__(self, url: str, pending: Any) -> None:
        self.run_id = next(_run_ids)
        self.url = url
        self.pending = pending
        self._image: bytes | None = None
        self._state = PlaceholderState.PENDING
        self._discarded = False
        self._listeners: list[Callable[[ImagePlaceholder], None]] = []
        self._lock = threading.Lock()

    @property
    def state(self) -> PlaceholderState:
        return self._state

    @property
    def image(self) -> bytes | None:
        """Image bytes once READY, else None."""
        return self._image

    @property
    def current(self) -> Any:
        """What the renderer should show right now."""
        if self._state is PlaceholderState.READY:
            return self._image
        return self.pending

    @property
    def discarded(self) -> bool:
        return self._discarded

    def add_listener(self, listener: Callable[[ImagePlaceholder], None]) -> None:
        """Call ``listener`` when the placeholder becomes READY.

        Listeners added after the swap are called immediately.
        """
        with self._lock:
            ready = self._state is PlaceholderState.READY
            if not ready:
                self._listeners.append(listener)
        if ready:
            listener(self)

    def resolve(self, image: bytes) -> bool:
        """Swap to READY with ``image``.

        Args:
            image: Fetched image bytes

        Returns:
            False if the placeholder was discarded and the image ignored.

        Raises:
            PlaceholderError: If ``image`` is empty

        """
        if not image:
            raise PlaceholderError(f"Empty image for placeholder {self.run_id} ({self.url})")
        with self._lock:
            if self._discarded:
                return False
            self._image = image
            self._state = PlaceholderState.READY
            listeners, self._listeners = self._listeners, []
        for listener in listeners:
            listener(self)
        return True

    def discard(self) -> None:
        """Mark the owning view as gone; later results are ignored."""
        with self._lock:
            self._discarded = True
            self._listeners.clear()

    def __repr__(self) -> str:
        return f"ImagePlaceholder({self.run_id}, {self.url!r}, {self._state.name})"


class ImageFetcher(Protocol):
    """Protocol for image-fetch collaborators.

    fetch() must not block: it returns a Future that completes with the
    image bytes or fails with an exception.
    """

    def fetch(self, url: str) -> Future[bytes]:
        """Start fetching ``url``."""
        ...


def request_image(
    placeholder: ImagePlaceholder,
    fetcher: ImageFetcher,
    dispatch: Callable[[Callable[[], None]], None],
) -> Future[bytes] | None:
    """Start a fetch for ``placeholder`` and wire the READY swap.

    Args:
        placeholder: Cell to resolve
        fetcher: Image-fetch collaborator
        dispatch: Runs a callback on the renderer's thread

    Returns:
        The fetch future, or None if the fetcher refused the request

    """
    url = placeholder.url
    try:
        future = fetcher.fetch(url)
    except Exception as e:
        # Placeholder stays PENDING; a fetcher must never fail the parse
        logger.warning("Image fetch not started for %s: %s", url, e)
        return None

    ref = weakref.ref(placeholder)

    def _apply(image: bytes) -> None:
        target = ref()
        if target is None:
            return
        try:
            if not target.resolve(image):
                logger.debug("Placeholder %d discarded, dropping %s", target.run_id, url)
        except PlaceholderError as e:
            logger.warning("%s", e)

    def _done(fut: Future[bytes]) -> None:
        target = ref()
        if target is None or target.discarded or fut.cancelled():
            return
        exc = fut.exception()
        if exc is not None:
            logger.warning("Image fetch failed for %s: %s", url, exc)
            return
        image = fut.result()
        dispatch(lambda: _apply(image))

    future.add_done_callback(_done)
    return future


class HttpxImageFetcher:
    """ImageFetcher backed by httpx and a worker thread pool.

    Usage:
        >>> with HttpxImageFetcher(timeout=10) as fetcher:
        ...     bb = BBCode(image_fetcher=fetcher, dispatch=ui_thread.post)
        ...     styled = bb("[eicon]wave[/eicon]")

    """

    __slots__ = ("_client", "_executor", "_owns_client")

    def __init__(
        self,
        *,
        client: httpx.Client | None = None,
        timeout: float = 30.0,
        max_workers: int = 4,
    ) -> None:
        """Initialize the fetcher.

        Args:
            client: Shared httpx.Client (the fetcher creates and owns one if None)
            timeout: Request timeout in seconds for an owned client
            max_workers: Number of concurrent downloads
        """
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout, follow_redirects=True)
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="bbstyle-images"
        )

    def fetch(self, url: str) -> Future[bytes]:
        try:
            return self._executor.submit(self._get, url)
        except RuntimeError as e:
            raise ImageFetchError(url, "fetcher is closed") from e

    def _get(self, url: str) -> bytes:
        try:
            resp = self._client.get(url)
        except httpx.HTTPError as e:
            raise ImageFetchError(url, str(e)) from e
        if not resp.is_success:
            raise ImageFetchError(url, "unexpected response", resp.status_code)
        content_type = resp.headers.get("content-type", "image/")
        if not content_type.startswith("image/"):
            raise ImageFetchError(url, f"not an image ({content_type})", resp.status_code)
        return resp.content

    def close(self) -> None:
        """Stop workers, cancel queued fetches, close an owned client."""
        self._executor.shutdown(wait=False, cancel_futures=True)
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> HttpxImageFetcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


__all__ = [
    "PlaceholderState",
    "ImagePlaceholder",
    "ImageFetcher",
    "HttpxImageFetcher",
    "request_image",
]
