"""
Exceptions raised by the journal stores and the AI bridge.

Every error carries a human-readable message; the command layer shows
``str(exc)`` to the user as-is.
"""


class DayJournalError(Exception):
    """Base class for all journal errors"""


class InvalidTimestamp(DayJournalError):
    """A date or time value could not be parsed"""


class QueryFailed(DayJournalError):
    """A read against the database failed"""


class WriteFailed(DayJournalError):
    """A write against the database failed"""


class DuplicateName(DayJournalError):
    """A prompt with the same name already exists"""


class ConfigMissing(DayJournalError):
    """No AI credentials have been saved yet"""


class ConfigCorrupt(DayJournalError):
    """The stored AI configuration cannot be read"""


class NetworkError(DayJournalError):
    """The AI endpoint could not be reached or rejected the request"""


class ResponseParseError(DayJournalError):
    """The AI endpoint answered with something that is not JSON"""


class PromptNotFound(DayJournalError):
    """No stored prompt has the requested name"""
