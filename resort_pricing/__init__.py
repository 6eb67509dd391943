"""Resort Pricing Service: rate resolution and discount stacking."""

__version__ = "1.0.0"
