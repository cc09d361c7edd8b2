"""Core of the KushL student/employer gig marketplace."""

__version__ = "0.1.0"
