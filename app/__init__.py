"""Customer.io to Segment webhook router."""

__version__ = "0.1.0"
