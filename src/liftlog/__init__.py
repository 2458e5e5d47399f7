"""liftlog: workout log with personal bests and next-weight recommendations."""

__version__ = "0.3.0"
