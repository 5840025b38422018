"""Shared pytest configuration: load the codestruct fixtures plugin."""

pytest_plugins = ["codestruct.presentation.pytest_plugin"]
