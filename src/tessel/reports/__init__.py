from tessel.reports.console import ConsoleListener


__all__ = ["ConsoleListener"]
