from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import DeclarativeBase
from invoice_analytics.core.config import settings

# Shared connection pool; every analytics query borrows one connection and hands it back
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DB_ECHO,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_pre_ping=True,
)


# All the models are "stored" in the Base class will be processed by the Engine
class Base(DeclarativeBase):
    pass
