"""Sales Tiers — rank practices by total sales and bucket them into S/A/B/C."""

__version__ = "0.1.0"
