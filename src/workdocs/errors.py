"""Exception hierarchy for workdocs.

Every error the CLI reports derives from WorkdocsError. A missing Progress
Summary section is not an error: update_plan() reports it through
UpdateResult.section_found instead.
"""


class WorkdocsError(Exception):
    """Base class for all workdocs errors.

    ``user_message`` is what the CLI prints; it defaults to the technical
    message.
    """

    def __init__(self, message: str, *, user_message: str | None = None, path: str = "") -> None:
        super().__init__(message)
        self.user_message = user_message or message
        self.path = path


class ConfigError(WorkdocsError):
    """Invalid configuration value (environment variable or CLI option)."""


class PlanNotFoundError(WorkdocsError):
    """The plan file does not exist, cannot be read, or its path cannot be derived."""


class InvalidPlanFormatError(WorkdocsError):
    """The plan document has no '### Phase N: ...' headings."""


class PlanWriteError(WorkdocsError):
    """Saving the updated plan failed."""


class PlanExistsError(WorkdocsError):
    """Refusing to overwrite an existing plan file."""
