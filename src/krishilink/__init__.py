"""KrishiLink - crop marketplace backend.

Farmers list crops, buyers express interest, and owners accept or reject
those interests. Accepting an interest deducts its quantity from the
listing's stock.
"""

__version__ = "0.1.0"
