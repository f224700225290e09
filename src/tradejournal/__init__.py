"""Trade journal analytics, behavioural insights and screenshot scanning."""

__version__ = "0.1.0"
