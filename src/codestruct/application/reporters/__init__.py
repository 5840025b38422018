"""Reporters for catalog results.

ConsoleReporter renders with rich; JsonReporter uses stdlib json.
Both return str and never print.
"""

from codestruct.application.reporters.console import ConsoleConfig, ConsoleReporter
from codestruct.application.reporters.json import JsonReporter

__all__ = [
    "ConsoleConfig",
    "ConsoleReporter",
    "JsonReporter",
]
