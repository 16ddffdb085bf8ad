"""ActivityCalendar - municipal activity calendar with Drive-backed attachments."""

__version__ = "0.1.0"
