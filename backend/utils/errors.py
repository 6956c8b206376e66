"""Error taxonomy for the JJ viewer backend.

Every failure the backend can report carries a ``kind`` (a stable name the
frontend can branch on) and a user-facing message. Library code raises these;
only the API layer turns them into HTTP responses.
"""


class JJViewerError(Exception):
    """Base class for all classified backend errors."""

    kind = "Error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# ============================================================================
# PATH VALIDATION
# ============================================================================


class PathValidationError(JJViewerError, ValueError):
    """A user-supplied path was rejected before any repository access."""

    kind = "PathValidationError"


class EmptyPath(PathValidationError):
    kind = "EmptyPath"

    def __init__(self):
        super().__init__("Path cannot be empty")


class UnsafePattern(PathValidationError):
    kind = "UnsafePattern"

    def __init__(self):
        super().__init__("Path contains potentially unsafe patterns")


class InvalidCharacters(PathValidationError):
    kind = "InvalidCharacters"

    def __init__(self):
        super().__init__("Path contains invalid characters")


class InvalidOrInaccessible(PathValidationError):
    kind = "InvalidOrInaccessible"

    def __init__(self):
        super().__init__("Invalid or inaccessible path")


class PathNotFound(PathValidationError):
    kind = "PathNotFound"

    def __init__(self):
        super().__init__("Path does not exist")


class NotADirectory(PathValidationError):
    kind = "NotADirectory"

    def __init__(self):
        super().__init__("Path is not a directory")


# ============================================================================
# REPOSITORY STRUCTURE
# ============================================================================


class RepositoryError(JJViewerError, ValueError):
    """The path exists but does not look like a JJ repository."""

    kind = "RepositoryError"


class NotARepository(RepositoryError):
    kind = "NotARepository"

    def __init__(self, message: str = "Not a JJ repository (no .jj directory found)"):
        super().__init__(message)


class MalformedRepositoryStructure(RepositoryError):
    kind = "MalformedRepositoryStructure"

    def __init__(self):
        super().__init__("Invalid JJ repository structure")


# ============================================================================
# EXTERNAL TOOL
# ============================================================================


class ToolError(JJViewerError, RuntimeError):
    """Running the jj binary failed."""

    kind = "ToolError"


class ToolNotFound(ToolError):
    kind = "ToolNotFound"

    def __init__(self):
        super().__init__(
            "JJ command not found. Please ensure Jujutsu is installed and in your PATH"
        )


class PermissionDenied(ToolError):
    kind = "PermissionDenied"

    def __init__(self):
        super().__init__("Permission denied when accessing the repository")


class ToolTimedOut(ToolError):
    kind = "ToolTimedOut"

    def __init__(self):
        super().__init__("JJ command timed out")


class ToolTerminatedBySignal(ToolError):
    kind = "ToolTerminatedBySignal"

    def __init__(self, command: str = "JJ command"):
        super().__init__(f"{command} was terminated")


class ToolExitFailure(ToolError):
    """The tool exited with a code the caller does not treat as success."""

    kind = "ToolExitFailure"

    def __init__(self, code: int, stderr: str, command: str = "JJ command"):
        self.code = code
        self.stderr = stderr
        super().__init__(f"{command} failed with exit code {code}: {stderr.strip()}")


class ToolInvocationError(ToolError):
    kind = "ToolInvocationError"

    def __init__(self, detail: str):
        super().__init__(f"Failed to execute JJ command: {detail}")


# ============================================================================
# LOG PARSING
# ============================================================================


class LogParseError(JJViewerError, ValueError):
    kind = "LogParseError"


class MalformedLogEntry(LogParseError):
    """Diagnostic for a single dropped entry. Never escapes the parser."""

    kind = "MalformedLogEntry"

    def __init__(self, lines: list[str], expected: int):
        self.lines = lines
        self.expected = expected
        super().__init__(
            f"Skipping malformed log entry with {len(lines)} fields "
            f"(expected {expected}): {lines!r}"
        )


class NoValidChanges(LogParseError):
    kind = "NoValidChanges"

    def __init__(self):
        super().__init__("No valid changes found in log output")
