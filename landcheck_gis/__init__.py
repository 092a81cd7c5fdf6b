"""Land-check GIS layer ingestion.

Turns heterogeneous, untagged raw records from the land-check backend
(cadastral parcels, gushim, land-use zoning, metro-corridor plans) into
validated WGS 84 GeoJSON features, loading them page by page without
letting one bad row abort a layer.
"""

__version__ = "0.1.0"
