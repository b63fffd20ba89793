"""Wizard step state machine.

Steps run trip details -> vehicle -> passenger & payment -> summary ->
confirmation. ``back`` returns to the immediately prior step from steps
2-4, ``edit`` jumps from the summary to any of steps 1-3, and only the
summary can advance to confirmation. Guards (required fields, vehicle
selection) are checked by the session before it asks for a transition.

Usage:
    >>> sm = WizardStateMachine()
    >>> sm.next()
    >>> sm.step
    <WizardStep.VEHICLE: 2>
    >>> sm.back()
    >>> sm.step
    <WizardStep.TRIP_DETAILS: 1>
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from bookingform.events import EventEmitter, WizardEvent
from bookingform.types import BookingType, EventType, WizardStep

logger = logging.getLogger(__name__)


class InvalidStepTransitionError(Exception):
    """Raised when a step transition is not allowed.

    Attributes:
        current_step: Step before the attempted transition
        target_step: Step that was requested
    """

    def __init__(self, current_step: WizardStep, target_step: Optional[WizardStep], message: str):
        self.current_step = current_step
        self.target_step = target_step
        super().__init__(message)


VALID_TRANSITIONS: Dict[WizardStep, Set[WizardStep]] = {
    WizardStep.TRIP_DETAILS: {WizardStep.VEHICLE},
    WizardStep.VEHICLE: {WizardStep.TRIP_DETAILS, WizardStep.PASSENGER_PAYMENT},
    WizardStep.PASSENGER_PAYMENT: {WizardStep.VEHICLE, WizardStep.SUMMARY},
    WizardStep.SUMMARY: {
        WizardStep.TRIP_DETAILS,
        WizardStep.VEHICLE,
        WizardStep.PASSENGER_PAYMENT,
        WizardStep.CONFIRMATION,
    },
    WizardStep.CONFIRMATION: set(),
}

# Steps reachable through Edit from the summary
EDITABLE_STEPS = (WizardStep.TRIP_DETAILS, WizardStep.VEHICLE, WizardStep.PASSENGER_PAYMENT)


@dataclass
class WizardStateMachine:
    """Tracks the current wizard step and enforces transitions.

    Attributes:
        step: Current step
        emitter: Optional emitter that receives a STEP_CHANGED event per transition
    """

    step: WizardStep = WizardStep.TRIP_DETAILS
    emitter: Optional[EventEmitter] = None
    _events: List[WizardEvent] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self):
        if not isinstance(self.step, WizardStep):
            self.step = WizardStep(self.step)

    def can_transition_to(self, target: WizardStep) -> bool:
        return target in VALID_TRANSITIONS.get(self.step, set())

    def transition_to(self, target: WizardStep, booking_type: Optional[BookingType] = None) -> None:
        """Move to ``target``.

        Raises:
            InvalidStepTransitionError: If the transition is not allowed

        Examples:
            >>> sm = WizardStateMachine()
            >>> sm.transition_to(WizardStep.SUMMARY)
            Traceback (most recent call last):
                ...
            bookingform.state_machine.InvalidStepTransitionError: Invalid step transition: cannot go from step 1 to step 4. Allowed: 2
        """
        target = WizardStep(target)
        if not self.can_transition_to(target):
            allowed = sorted(int(s) for s in VALID_TRANSITIONS[self.step])
            raise InvalidStepTransitionError(
                current_step=self.step,
                target_step=target,
                message=(
                    f"Invalid step transition: cannot go from step {int(self.step)} to step {int(target)}. "
                    f"Allowed: {', '.join(str(s) for s in allowed)}"
                    if allowed
                    else f"Invalid step transition: step {int(self.step)} is final"
                ),
            )
        previous = self.step
        self.step = target
        logger.debug("Wizard step %d -> %d", previous, target)
        self._record(previous, target, booking_type)

    def next(self, booking_type: Optional[BookingType] = None) -> None:
        """Advance to the following step."""
        if self.is_terminal():
            raise InvalidStepTransitionError(self.step, None, "Invalid step transition: wizard is complete")
        self.transition_to(WizardStep(self.step + 1), booking_type)

    def back(self, booking_type: Optional[BookingType] = None) -> None:
        """Return to the immediately prior step (steps 2-4 only)."""
        if self.step not in (WizardStep.VEHICLE, WizardStep.PASSENGER_PAYMENT, WizardStep.SUMMARY):
            raise InvalidStepTransitionError(
                self.step, None, f"Invalid step transition: cannot go back from step {int(self.step)}"
            )
        self.transition_to(WizardStep(self.step - 1), booking_type)

    def edit(self, target: WizardStep, booking_type: Optional[BookingType] = None) -> None:
        """Jump from the summary to one of steps 1-3."""
        target = WizardStep(target)
        if self.step != WizardStep.SUMMARY or target not in EDITABLE_STEPS:
            raise InvalidStepTransitionError(
                self.step,
                target,
                f"Invalid step transition: edit to step {int(target)} is only available from the summary",
            )
        self.transition_to(target, booking_type)

    def is_terminal(self) -> bool:
        return not VALID_TRANSITIONS[self.step]

    def _record(self, previous: WizardStep, target: WizardStep, booking_type: Optional[BookingType]) -> None:
        event = WizardEvent.create(
            EventType.STEP_CHANGED,
            target,
            booking_type,
            {"from": int(previous), "to": int(target)},
        )
        self._events.append(event)
        if self.emitter is not None:
            self.emitter.emit(event)

    def get_events(self) -> List[WizardEvent]:
        """Step-change events in chronological order."""
        return list(self._events)

    def to_dict(self) -> Dict[str, Any]:
        """
        Examples:
            >>> WizardStateMachine(step=WizardStep.SUMMARY).to_dict()
            {'step': 4}
        """
        return {"step": int(self.step)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WizardStateMachine":
        return cls(step=WizardStep(data["step"]))


__all__ = [
    "WizardStateMachine",
    "InvalidStepTransitionError",
    "VALID_TRANSITIONS",
    "EDITABLE_STEPS",
]
