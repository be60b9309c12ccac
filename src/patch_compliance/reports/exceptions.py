"""Exceptions raised while rendering reports."""


class RenderError(Exception):
    """An internal invariant of the renderer or converter was violated.

    Never expected on input produced by render_markdown; indicates a
    programming defect rather than a user-facing condition.
    """

    pass
