from sqlalchemy import Column, Integer, String, JSON
from database import Base
from models.audit_mixin import TimestampMixin


class KVStore(Base, TimestampMixin):
    """Flat key-value namespace holding every entity as a JSON document.

    Keys look like ``<entity>:<factory_id>:<entity_id>``. ``id`` only records
    insertion order, which prefix scans preserve.
    """
    __tablename__ = "kv_store"

    id = Column(Integer, primary_key=True, autoincrement=True)
    key = Column(String, unique=True, index=True, nullable=False)
    value = Column(JSON, nullable=False)

    def __repr__(self):
        return f"<KVStore(id={self.id}, key={self.key})>"
