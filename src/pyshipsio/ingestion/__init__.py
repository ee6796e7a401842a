"""Ingestion layer.

This package converts what the local Signal K server and ShipsIO hand us
(nested vessel documents, flattened peer records, raw response bodies)
into normalized :class:`pyshipsio.models.VesselRecord` objects.
"""

__all__: list[str] = []
