"""Upload lifecycle state machine.

Tracks one :meth:`UploadPipeline.upload` call through its stages and
enforces valid transitions, so a stage can never run out of order (for
example compression before watermarking, or a backup after a failure).
"""

from __future__ import annotations

from imagebed.models import UploadStage


class UploadStateMachine:
    """Finite state machine for a single upload call.

    Valid transitions::

        IDLE          -> VALIDATING
        VALIDATING    -> WATERMARKING | COMPRESSING | ENCODING | FAILED
        WATERMARKING  -> COMPRESSING | ENCODING
        COMPRESSING   -> ENCODING
        ENCODING      -> TRANSMITTING
        TRANSMITTING  -> INTERPRETING | FAILED
        INTERPRETING  -> SUCCEEDED | FAILED
        SUCCEEDED     -> (terminal)
        FAILED        -> (terminal)

    The processing stages have no edge to ``FAILED``: they always fall
    back to the unmodified file.

    Parameters
    ----------
    file_name:
        Name of the file being uploaded, used in error messages.
    """

    VALID_TRANSITIONS: dict[UploadStage, set[UploadStage]] = {
        UploadStage.IDLE: {UploadStage.VALIDATING},
        UploadStage.VALIDATING: {
            UploadStage.WATERMARKING,
            UploadStage.COMPRESSING,
            UploadStage.ENCODING,
            UploadStage.FAILED,
        },
        UploadStage.WATERMARKING: {UploadStage.COMPRESSING, UploadStage.ENCODING},
        UploadStage.COMPRESSING: {UploadStage.ENCODING},
        UploadStage.ENCODING: {UploadStage.TRANSMITTING},
        UploadStage.TRANSMITTING: {UploadStage.INTERPRETING, UploadStage.FAILED},
        UploadStage.INTERPRETING: {UploadStage.SUCCEEDED, UploadStage.FAILED},
        UploadStage.SUCCEEDED: set(),
        UploadStage.FAILED: set(),
    }

    def __init__(self, file_name: str) -> None:
        self.file_name: str = file_name
        self.state: UploadStage = UploadStage.IDLE
        self.history: list[UploadStage] = [UploadStage.IDLE]

    def transition(self, new_state: UploadStage) -> None:
        """Attempt to transition to *new_state*.

        Raises
        ------
        ValueError
            If the transition from the current state to *new_state* is
            not valid.
        """
        allowed = self.VALID_TRANSITIONS.get(self.state, set())

        if new_state not in allowed:
            raise ValueError(
                f"Invalid state transition: {self.state.value} -> {new_state.value} "
                f"for upload of {self.file_name}. "
                f"Allowed transitions from {self.state.value}: "
                f"{{{', '.join(sorted(s.value for s in allowed))}}}"
            )

        self.state = new_state
        self.history.append(new_state)
