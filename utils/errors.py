"""
Error kinds raised at the network-client boundary.

Node rejection text is read here only; the engine branches on exception type.
"""

# Node messages for a tx that does not outbid the one already at its nonce.
FEE_COLLISION_HINTS = (
    "replacement fee too low",
    "replacement transaction underpriced",
)


class DispatchError(Exception):
    """Base class for dispatch engine errors."""


class SubmissionError(DispatchError):
    """The node rejected a signed transaction."""


class FeeCollisionError(SubmissionError):
    """The tx underbids another one already sitting at the same nonce."""


class ReceiptNotReady(DispatchError):
    """No receipt for the hash yet."""


def classify_submission_error(exc: BaseException) -> SubmissionError:
    msg = (str(exc) or "").lower()
    if any(h in msg for h in FEE_COLLISION_HINTS):
        return FeeCollisionError(str(exc))
    return SubmissionError(str(exc))
