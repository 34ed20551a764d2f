"""
Catalog layer discovery.

Expands catalog entries that point at a root ArcGIS REST service into one
entry per concrete sublayer.
"""

__version__ = "0.1.0"
