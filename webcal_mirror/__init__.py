"""Mirror iCalendar feeds into Google Calendar."""

__version__ = "0.1.0"
