from __future__ import annotations


class ImageAnalyzerError(RuntimeError):
    """Base error carrying a message suitable for showing to the user."""

    user_message = "Something went wrong"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.user_message)
        if message:
            self.user_message = message


class MissingCredential(ImageAnalyzerError):
    user_message = "Please enter an API key"


class EmptyInput(ImageAnalyzerError):
    user_message = "Please upload images"


class MissingDestination(ImageAnalyzerError):
    user_message = "Please enter a Google Sheets URL"


class AnalysisItemError(ImageAnalyzerError):
    """Raised by an analyzer when a single image cannot be analyzed."""

    user_message = "Image analysis failed"
