"""
Setup failures raised while acquiring the camera or the hand model.

Only startup can fail; the per-frame loop has no error states.
"""


class SetupError(RuntimeError):
    """Startup could not complete; the system stays stopped."""


class CameraUnavailableError(SetupError):
    """Camera missing, busy, or access denied."""


class ModelLoadError(SetupError):
    """Hand landmark model could not be created."""
