"""NRW semester enrollment trends: load, clean, aggregate and chart guest student counts."""

__version__ = "0.1.0"
