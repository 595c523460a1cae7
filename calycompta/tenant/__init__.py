from .resolver import get_club_collection, get_global_collection

__all__ = ["get_club_collection", "get_global_collection"]
