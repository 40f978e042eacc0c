"""Adapters for the task, tracking and shortcut executables."""
