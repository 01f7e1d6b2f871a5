"""Error taxonomy for the setup pipeline.

Every failure the pipeline can report is a ``SetupError`` subclass carrying a
stable ``code`` (used in the ``--json`` run state) and an optional ``step``
name filled in by the pipeline when the error escapes a step.
"""

from __future__ import annotations


class SetupError(Exception):
    """Base class for every fatal pipeline error."""

    code = "SetupError"

    def __init__(self, message: str, *, step: str | None = None) -> None:
        self.message = message
        self.step = step
        super().__init__(message)

    def __str__(self) -> str:
        if self.step:
            return f"[{self.code}] step '{self.step}': {self.message}"
        return f"[{self.code}] {self.message}"


class ConfigMissing(SetupError):
    code = "ConfigMissing"


class ConfigInvalid(SetupError):
    code = "ConfigInvalid"


class ToolNotFound(SetupError):
    code = "ToolNotFound"


class ToolNotAuthenticated(SetupError):
    code = "ToolNotAuthenticated"


class TargetExists(SetupError):
    code = "TargetExists"


class MarkupFileMissing(SetupError):
    code = "MarkupFileMissing"


class MarkupMalformed(SetupError):
    """The markup file exists but has no ``<head>`` to insert into."""

    code = "MarkupMalformed"


class RemoteRepoExists(SetupError):
    code = "RemoteRepoExists"


class CommandFailed(SetupError):
    """An external command exited non-zero.

    The command line and its stderr are kept verbatim so the caller can show
    exactly what the external tool reported.
    """

    code = "CommandFailed"

    def __init__(
        self,
        message: str,
        command: str = "",
        stderr: str = "",
        *,
        step: str | None = None,
    ) -> None:
        self.command = command
        self.stderr = stderr
        super().__init__(message, step=step)


class DependencyInstallFailed(CommandFailed):
    code = "DependencyInstallFailed"


class VersionControlFailed(CommandFailed):
    code = "VersionControlFailed"


class PushRejected(CommandFailed):
    code = "PushRejected"


class DeployFailed(CommandFailed):
    code = "DeployFailed"


class PreviewFailed(CommandFailed):
    code = "PreviewFailed"
