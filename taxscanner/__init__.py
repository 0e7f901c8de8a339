"""Tax Scanner - US sales-tax rate lookup by state, county and city."""

__version__ = "1.0.0"
