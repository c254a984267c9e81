# TDX Feedback Errors
# Exceptions raised by the TDX client

class TdxFeedbackError(Exception):
    """Base exception for TDX feedback operations"""
    pass


class HttpError(TdxFeedbackError):
    """Non-2xx response from the TDX gateway, or an OAuth reply without a token.

    Carries the numeric status code and the raw response body for diagnostics.
    """

    def __init__(self, message, status, body=None):
        super().__init__(message)
        self.status = status
        self.body = body

    def __str__(self):
        return f"{self.args[0]} (status {self.status})"
