import logging

from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine, select

from red_mansion import crud
from red_mansion.core.config import settings
from red_mansion.models import User, UserCreate

logger = logging.getLogger(__name__)


def build_engine(url: str):
    if url.startswith("sqlite"):
        # In-memory SQLite needs a single shared connection across threads.
        pool_kwargs = {"poolclass": StaticPool} if ":memory:" in url else {}
        return create_engine(
            url, connect_args={"check_same_thread": False}, **pool_kwargs
        )
    return create_engine(url, pool_pre_ping=True)


engine = build_engine(settings.DATABASE_URL)


def init_db(session: Session) -> None:
    SQLModel.metadata.create_all(session.get_bind())

    user = session.exec(
        select(User).where(User.email == settings.FIRST_SUPERUSER)
    ).first()
    if not user:
        logger.info("Creating first superuser %s", settings.FIRST_SUPERUSER)
        user_in = UserCreate(
            email=settings.FIRST_SUPERUSER,
            password=settings.FIRST_SUPERUSER_PASSWORD,
            is_superuser=True,
        )
        crud.create_user(session=session, user_create=user_in)
