"""ChillStage: chiller staging analysis and priority-order ranking."""

__version__ = "0.1.0"
