"""
SQLAlchemy ORM Models for the table store.

Every logical table shares one physical table keyed by
(table_name, partition_key, row_key); row properties are stored as JSON
text, so tables stay schema-light.
"""

from sqlalchemy import Column, DateTime, Index, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class TableEntityORM(Base):
    """ORM model for the table_entities table."""
    
    __tablename__ = 'table_entities'
    
    table_name = Column(String(63), primary_key=True)
    partition_key = Column(String(1024), primary_key=True)
    row_key = Column(String(1024), primary_key=True)
    
    properties = Column(Text, nullable=False, default='{}')  # JSON
    timestamp = Column(DateTime(timezone=True), nullable=True)
    etag = Column(String(64), nullable=True)
    
    __table_args__ = (
        Index('idx_table_entities_partition', 'table_name', 'partition_key'),
    )
    
    def __repr__(self) -> str:
        return f"<TableEntityORM {self.table_name}:{self.partition_key}/{self.row_key}>"
