from .store import RecordStore, get_record_store, is_not_found

__all__ = ["RecordStore", "get_record_store", "is_not_found"]
