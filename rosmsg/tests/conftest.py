"""Shared pytest configuration for the rosmsg test suites."""


def pytest_configure(config):
    """Hide file paths in the terminal report, the describe blocks name the tests."""
    terminal = config.pluginmanager.getplugin("terminal")
    if terminal:
        terminal.TerminalReporter.showfspath = False
