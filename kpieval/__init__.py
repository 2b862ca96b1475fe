"""KPI evaluation engine: formulas, scoring criteria and weighted summaries."""

__version__ = "0.1.0"
