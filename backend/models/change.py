"""Data models for JJ repository changes and the repository endpoints.

JJChange mirrors one record of `jj log` output. The frontend renders the list
returned by /repos/changes (or the command-style /get_jj_changes alias).
"""

from pydantic import BaseModel, Field

NO_DESCRIPTION = "(no description)"
UNKNOWN_AUTHOR = "(unknown)"


class JJChange(BaseModel):
    """One change as reported by `jj log`."""

    change_id: str = Field(min_length=1)
    commit_id: str = Field(min_length=1)
    description: str = NO_DESCRIPTION
    author: str = UNKNOWN_AUTHOR
    timestamp: str  # Formatted by jj, passed through untouched


class JJChangeListResponse(BaseModel):
    """Response model for listing changes."""

    items: list[JJChange]


class RepoPathRequest(BaseModel):
    """Request body for endpoints that take a repository path."""

    path: str


class RepoValidationResponse(BaseModel):
    path: str
    valid: bool


class GreetRequest(BaseModel):
    name: str


class GreetResponse(BaseModel):
    message: str
