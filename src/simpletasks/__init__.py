"""SimpleTasks: checkbox task index over a markdown vault."""

__version__ = "0.2.0"
