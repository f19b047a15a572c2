class MediaError(Exception):
    pass


class InvalidInput(MediaError):
    """Rejected before the pipeline starts (empty file, missing filename)."""


class MediaProcessingError(MediaError):
    pass


class IOFailure(MediaProcessingError):
    """Local filesystem failure while staging, transcoding or cleaning up."""


class TranscodeFailure(MediaProcessingError):
    def __init__(self, exit_code: int, message: str = ""):
        self.exit_code = exit_code
        super().__init__(message or f"Ffmpeg failed with exit code {exit_code}")
