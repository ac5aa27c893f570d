from models.kv_store import KVStore

__all__ = ['KVStore']
