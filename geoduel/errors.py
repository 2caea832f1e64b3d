from typing import Any, Dict

from fastapi import status


class DuelError(Exception):
    """Structured failure surfaced to the client as ``{"error": code, ...context}``."""

    def __init__(self, status_code: int, error: str, **context: Any):
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.context = context

    def to_content(self) -> Dict[str, Any]:
        return {"error": self.error, **self.context}


class InvalidRequestError(DuelError):
    def __init__(self):
        super().__init__(status.HTTP_400_BAD_REQUEST, "invalid_request")


class RoundNotFoundError(DuelError):
    def __init__(self):
        super().__init__(status.HTTP_400_BAD_REQUEST, "round_not_found")


class MatchNotFoundError(DuelError):
    def __init__(self):
        super().__init__(status.HTTP_404_NOT_FOUND, "match_not_found")


class MatchCompletedError(DuelError):
    def __init__(self, scores: Dict[str, int], history: list):
        super().__init__(
            status.HTTP_409_CONFLICT, "match_completed", scores=scores, history=history
        )


class RoundOutOfSyncError(DuelError):
    def __init__(self, expected_round: Any):
        super().__init__(
            status.HTTP_409_CONFLICT, "round_out_of_sync", expectedRound=expected_round
        )


class ImageSourceError(RuntimeError):
    """The image source could not produce a round."""
