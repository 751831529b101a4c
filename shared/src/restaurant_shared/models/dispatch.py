"""Outcome of dispatching a payment event."""

from pydantic import BaseModel, ConfigDict

from .enums import DispatchResult, ReferenceKind


class DispatchOutcome(BaseModel):
    """What the dispatcher did with one event.

    ``new_status`` is set only for ``APPLIED`` outcomes that changed a record.
    """

    model_config = ConfigDict(frozen=True)

    result: DispatchResult
    reference_kind: ReferenceKind | None = None
    reference_id: str | None = None
    new_status: str | None = None
    message: str | None = None

    @classmethod
    def applied(
        cls,
        reference_kind: ReferenceKind | None,
        reference_id: str | None,
        new_status: str | None,
    ) -> "DispatchOutcome":
        return cls(
            result=DispatchResult.APPLIED,
            reference_kind=reference_kind,
            reference_id=reference_id,
            new_status=new_status,
        )

    @classmethod
    def replay(cls) -> "DispatchOutcome":
        return cls(result=DispatchResult.REPLAY, message="Event already processed")

    @classmethod
    def ignored(cls, message: str) -> "DispatchOutcome":
        return cls(result=DispatchResult.IGNORED, message=message)

    @classmethod
    def unknown_reference(
        cls, reference_kind: ReferenceKind, reference_id: str
    ) -> "DispatchOutcome":
        return cls(
            result=DispatchResult.UNKNOWN_REFERENCE,
            reference_kind=reference_kind,
            reference_id=reference_id,
            message=f"{reference_kind.value} {reference_id} not found",
        )

    @classmethod
    def malformed(cls, message: str) -> "DispatchOutcome":
        return cls(result=DispatchResult.MALFORMED, message=message)

    @property
    def is_applied(self) -> bool:
        return self.result == DispatchResult.APPLIED
