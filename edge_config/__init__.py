"""
edge_config package marker.

Edge patch configuration engine: turns content suggestions into DOM patches,
merges them into per-URL configuration documents, persists them and
invalidates the CDN.
"""
