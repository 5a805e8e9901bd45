"""Exception classes for bbstyle.

Parsing itself never raises for any input string: malformed markup is left
as literal text. These exceptions cover the collaborators around the parser
(image fetching, catalog lookup, placeholder state).
"""

from __future__ import annotations


class BBStyleError(Exception):
    """Base exception for all bbstyle errors.

    Subclass this for specific error categories.
    """

    pass


class ImageFetchError(BBStyleError):
    """Error while fetching an icon or emote image.

    Raised by image fetchers. The parser catches it through the fetch
    future and leaves the placeholder in its pending state.
    """

    def __init__(
        self,
        url: str,
        message: str,
        status_code: int | None = None,
    ) -> None:
        """Initialize fetch error.

        Args:
            url: The image URL that failed
            message: Description of the failure
            status_code: HTTP status code, if a response was received
        """
        self.url = url
        self.status_code = status_code

        status = f" (HTTP {status_code})" if status_code is not None else ""
        super().__init__(f"{url}{status}: {message}")


class CatalogError(BBStyleError):
    """Error when a tag code is not part of the catalog."""

    def __init__(self, code: str, message: str) -> None:
        """Initialize catalog error.

        Args:
            code: The tag code that was looked up (e.g., "b", "color")
            message: Description of the error
        """
        self.code = code
        super().__init__(f"Tag '{code}': {message}")


class PlaceholderError(BBStyleError):
    """Invalid image placeholder transition.

    Raised when a placeholder is resolved with unusable image data.
    """

    pass
