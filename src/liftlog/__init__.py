"""liftlog: a strength workout log with super sets, personal records and progress analytics."""

__version__ = "0.1.0"
