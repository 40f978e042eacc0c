"""taskdash: interactive terminal dashboard for Taskwarrior."""

__version__ = "0.3.0"
