class AppError(Exception):
    """Base application exception."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class InvalidTimeFormat(AppError, ValueError):
    """A clock value is not a valid "HH:MM" string."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"Invalid time format: {value!r} (expected HH:MM)")


class HolidaySourceError(AppError):
    """The public holiday source could not be reached or answered with an error."""


class FeedFetchError(AppError):
    """A calendar feed could not be fetched through any route."""


class FeedFormatError(FeedFetchError):
    """A fetched body is not a calendar document."""
