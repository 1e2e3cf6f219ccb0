# userservice/core/user.py

import logging
from typing import Any, List

from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from userservice.exceptions import (
    DuplicateUserError,
    InvalidUserError,
    StoreError,
    StoreUnavailableError,
    UserServiceError,
)
from userservice.models.user import User

logger = logging.getLogger(__name__)

# Postgres SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


def coerce_age(age: Any) -> Any:
    """
    Read age the way an INT column would cast it.

    Form posts deliver "30" rather than 30. Missing values pass through as
    None so the NOT NULL constraint reports them.
    """
    if age is None or isinstance(age, int) and not isinstance(age, bool):
        return age
    if isinstance(age, float) and age.is_integer():
        return int(age)
    if isinstance(age, str):
        try:
            return int(age.strip())
        except ValueError:
            pass
    raise InvalidUserError(f"invalid integer value for age: {age!r}")


def _is_unique_violation(error: IntegrityError) -> bool:
    code = getattr(error.orig, "pgcode", None)
    if code is not None:
        return code == UNIQUE_VIOLATION
    # SQLite reports constraint failures by message only
    return "unique" in str(error.orig).lower()


def _translate(error: SQLAlchemyError) -> UserServiceError:
    """Map a SQLAlchemy failure onto the service's error taxonomy."""
    if isinstance(error, IntegrityError):
        if _is_unique_violation(error):
            return DuplicateUserError()
        return InvalidUserError()
    if isinstance(error, OperationalError) or (
        isinstance(error, DBAPIError) and error.connection_invalidated
    ):
        return StoreUnavailableError()
    if isinstance(error, DBAPIError):
        # DataError and friends: the store rejected the values themselves
        return InvalidUserError()
    return StoreError()


def list_users(db: Session) -> List[User]:
    """Return every user in whatever order the store hands them back."""
    try:
        return db.query(User).all()
    except SQLAlchemyError as e:
        raise _translate(e) from e


def create_user(db: Session, name: Any, email: Any, age: Any) -> User:
    """
    Insert one user. All values travel as bound parameters.

    Constraint checking is left to the table definition; a failed insert
    is rolled back so the session stays usable.
    """
    user = User(name=name, email=email, age=coerce_age(age))
    db.add(user)
    try:
        db.flush()
        user_id = user.id
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise _translate(e) from e

    logger.info("Created user %s (id=%s)", name, user_id)

    # The row is committed at this point; a failed reload must not report otherwise
    try:
        db.refresh(user)
    except SQLAlchemyError as e:
        logger.warning("User id=%s stored but could not be reloaded: %s", user_id, e)
    return user
