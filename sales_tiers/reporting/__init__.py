"""
sales_tiers.reporting — terminal formatting and flat-file export.

Modules:
  formatters — currency formatting and ASCII tier tables for Typer commands.
  export     — CSV/JSON writers for classification results.
"""
