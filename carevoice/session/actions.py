"""Acknowledgements for suggested follow-up actions."""

from ..models.responses import ActionType, VoiceAction
from ..models.session import Notice

ACTION_NOTICES = {
    ActionType.GROCERY: Notice("Added to Grocery List", "Low-sodium foods added"),
    ActionType.REMINDER: Notice("Reminder Set", "You'll be notified at the scheduled time"),
    ActionType.NOTE: Notice("Note Saved", "Your note has been saved"),
    ActionType.APPOINTMENT: Notice("Appointment", "Opening appointment scheduler"),
}


def acknowledge_action(action: VoiceAction) -> Notice:
    """Notice shown when the user picks an action; selecting twice is harmless."""
    return ACTION_NOTICES[action.type]
