"""Parsing of `jj log` output into JJChange records.

The record layout is declared once in LOG_FIELDS. The jj template passed on
the command line and the positional parser are both derived from it.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from models.change import NO_DESCRIPTION, UNKNOWN_AUTHOR, JJChange
from utils.errors import MalformedLogEntry, NoValidChanges

logger = logging.getLogger(__name__)

RECORD_SEPARATOR = "---\n"
REQUIRED_FIELDS = ("change_id", "commit_id")


@dataclass(frozen=True)
class LogField:
    """One line of a log record: JJChange attribute, jj template expression, placeholder."""

    name: str
    expression: str
    default: Optional[str] = None

    def template(self) -> str:
        if self.default is None:
            return self.expression
        return f'coalesce({self.expression}, "{self.default}")'


LOG_FIELDS: tuple[LogField, ...] = (
    LogField("change_id", "change_id"),
    LogField("commit_id", "commit_id"),
    LogField("description", "description", NO_DESCRIPTION),
    LogField("author", "author.name()", UNKNOWN_AUTHOR),
    LogField("timestamp", "committer.timestamp()"),
)

EXPECTED_FIELDS = len(LOG_FIELDS)


def build_log_template(fields: tuple[LogField, ...] = LOG_FIELDS) -> str:
    """Render the jj template that emits one line per field and a `---` terminator."""
    body = ' ++ "\\n" ++ '.join(field.template() for field in fields)
    return body + ' ++ "\\n---\\n"'


JJ_LOG_TEMPLATE = build_log_template()


def _split_entries(log_output: str) -> list[list[str]]:
    entries = []
    for block in log_output.split(RECORD_SEPARATOR):
        block = block.strip()
        if not block:
            continue
        entries.append(block.split("\n"))
    return entries


def _entry_to_change(lines: list[str]) -> Optional[JJChange]:
    values = {}
    for field, line in zip(LOG_FIELDS, lines):
        value = line.strip()
        if not value and field.default is not None:
            value = field.default
        values[field.name] = value

    if any(not values[name] for name in REQUIRED_FIELDS):
        logger.warning("Skipping entry with missing critical identifiers: %r", lines)
        return None

    return JJChange(**values)


def parse_jj_log(log_output: str) -> list[JJChange]:
    """
    Parse the output of `jj log --template JJ_LOG_TEMPLATE`.

    Blocks are separated by a `---` line. A block needs at least
    EXPECTED_FIELDS lines; shorter blocks and blocks without a change or commit
    id are logged and dropped without failing the parse. Blank description and
    author lines become their placeholders. Record order is kept as emitted.

    Args:
        log_output: Captured stdout of the log command.

    Returns:
        list[JJChange]: Parsed records; empty when the output is blank.

    Raises:
        NoValidChanges: If the output is not blank but no record survived.
    """
    changes: list[JJChange] = []

    for lines in _split_entries(log_output):
        if len(lines) < EXPECTED_FIELDS:
            logger.warning("%s", MalformedLogEntry(lines, EXPECTED_FIELDS))
            continue

        change = _entry_to_change(lines[:EXPECTED_FIELDS])
        if change is not None:
            changes.append(change)

    if not changes and log_output.strip():
        raise NoValidChanges()

    return changes
