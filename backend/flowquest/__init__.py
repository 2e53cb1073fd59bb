"""FlowQuest: learning-activity tracking backend."""

__version__ = "0.1.0"
