"""Classification of category file lines into log references."""
from __future__ import annotations

import re

from finkreport.report_core.models import LogLine, Unparsed, WithoutReason, WithReason

WITH_REASON_PATTERN = re.compile(r"^(?P<logname>\S+)\.log\s+(?P<reason>\S.*?)\s*$")
WITHOUT_REASON_PATTERN = re.compile(r"^(?P<logname>\S+?)\.log")


def parse_log_line(line: str) -> LogLine:
    """Classify one line of a category file.

    ``foo.log  timeout`` yields ``WithReason("foo", "timeout")``, ``foo.log``
    (or ``foo.log`` followed by anything that is not whitespace plus a reason)
    yields ``WithoutReason("foo")``. Everything else is ``Unparsed``.
    """
    text = line.rstrip("\r\n")
    match = WITH_REASON_PATTERN.match(text)
    if match:
        return WithReason(match.group("logname"), match.group("reason"))
    match = WITHOUT_REASON_PATTERN.match(text)
    if match:
        return WithoutReason(match.group("logname"))
    return Unparsed(text)
