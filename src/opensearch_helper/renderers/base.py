"""Base definitions shared by the renderers."""


class RenderError(Exception):
    """Raised when a page or document cannot be rendered.

    The server answers the current request with a 500 and keeps running.
    """
