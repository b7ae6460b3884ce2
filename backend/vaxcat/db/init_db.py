from vaxcat.db.session import engine
from vaxcat.db.base import Base

# IMPORTANT: import models so they register with Base.metadata
import vaxcat.db.models  # noqa: F401


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
