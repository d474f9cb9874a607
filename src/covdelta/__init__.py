"""covdelta: relative code-coverage metrics for changed lines."""

__version__ = "0.1.0"
