"""
Services layer for catalog layer discovery.

MODULES:
- arcgis/: ArcGIS REST client, URL classification, response models

STANDALONE SERVICES:
- geometry: Esri geometry type normalization
- expansion: root service record -> pinned / per-sublayer records
- reconciler: splice expansions into catalog order, dedupe ids
- catalog_store: catalog JSON read / atomic write
- retry_utils: result-driven retries with linear backoff

ARCHITECTURE:
1. Classification: arcgis.classify_service_url -> root / sublayer / other
2. Discovery: arcgis.ArcGISServiceClient -> layer listing + layer metadata
3. Expansion: expansion.ExpansionEngine -> replacement records
4. Reconciliation: reconciler.reconcile -> final ordered, deduplicated catalog
"""
