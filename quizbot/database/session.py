from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession, AsyncEngine


def create_db_engine(database_url: str) -> AsyncEngine:
    """
    Creates and returns a new SQLAlchemy async engine.
    """
    connect_args = {"timeout": 30} if database_url.startswith("postgresql") else {}
    return create_async_engine(
        database_url,
        echo=False,
        connect_args=connect_args,
    )


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Creates and returns a fully configured SQLAlchemy async session maker.
    """
    return async_sessionmaker(
        bind=engine, class_=AsyncSession, expire_on_commit=False
    )
