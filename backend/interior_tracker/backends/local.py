"""
Interior Tracker - Local Provider
Self-hosted stand-in for the hosted backend: SQLAlchemy records,
filesystem blobs and JWT sessions
"""
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Type

import aiofiles
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import inspect as sa_inspect, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from interior_tracker.backends.base import Backend, Record
from interior_tracker.database import Base
from interior_tracker.errors import AuthenticationFailed, NotFound, RemoteServiceError
from interior_tracker.models import Image, Pin, Project, User
from interior_tracker.schemas.auth import AuthSession

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"

TABLES: Dict[str, Type[Base]] = {
    "projects": Project,
    "images": Image,
    "pins": Pin,
}


def _column_keys(model: Type[Base]) -> Dict[str, str]:
    """Map column names to mapped attribute names (pins.metadata -> pin_metadata)."""
    return {prop.columns[0].name: prop.key for prop in sa_inspect(model).column_attrs}


def _to_record(obj: Base) -> Record:
    return {column: getattr(obj, key) for column, key in _column_keys(type(obj)).items()}


class LocalRecordStore:
    """RecordStore over the async SQLAlchemy models; one session per call."""

    def __init__(self, session_maker: async_sessionmaker):
        self.session_maker = session_maker

    def _model(self, table: str) -> Type[Base]:
        try:
            return TABLES[table]
        except KeyError:
            raise RemoteServiceError(f'relation "{table}" does not exist') from None

    def _attributes(self, model: Type[Base], values: Record) -> Dict[str, Any]:
        keys = _column_keys(model)
        unknown = [column for column in values if column not in keys]
        if unknown:
            raise RemoteServiceError(
                f"Could not find the '{unknown[0]}' column of '{model.__tablename__}'"
            )
        return {keys[column]: value for column, value in values.items()}

    async def insert(self, table: str, record: Record) -> Record:
        model = self._model(table)
        obj = model(**self._attributes(model, record))

        async with self.session_maker() as session:
            try:
                session.add(obj)
                await session.commit()
                await session.refresh(obj)
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Insert into {table} failed: {e}")
                raise RemoteServiceError(str(getattr(e, "orig", None) or e)) from e

            return _to_record(obj)

    async def select(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Record]:
        model = self._model(table)
        query = select(model)

        for key, value in self._attributes(model, filters or {}).items():
            query = query.where(getattr(model, key) == value)

        if order_by:
            order_key = next(iter(self._attributes(model, {order_by: None})))
            column = getattr(model, order_key)
            query = query.order_by(column.desc() if descending else column.asc())

        async with self.session_maker() as session:
            try:
                result = await session.execute(query)
            except SQLAlchemyError as e:
                logger.error(f"Select from {table} failed: {e}")
                raise RemoteServiceError(str(getattr(e, "orig", None) or e)) from e

            return [_to_record(obj) for obj in result.scalars().all()]

    async def update(self, table: str, record_id: str, changes: Record) -> None:
        model = self._model(table)
        attributes = self._attributes(model, changes)

        async with self.session_maker() as session:
            try:
                obj = await session.get(model, record_id)
                if obj is None:
                    raise NotFound(f"No row in {table} with id {record_id}")

                for key, value in attributes.items():
                    setattr(obj, key, value)
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Update of {table} {record_id} failed: {e}")
                raise RemoteServiceError(str(getattr(e, "orig", None) or e)) from e

    async def health(self) -> Dict[str, str]:
        """Run a trivial query against the database this store writes to."""
        try:
            async with self.session_maker() as session:
                await session.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.warning(f"Database health check failed: {e}")
            return {"database": f"error: {e}"}
        return {"database": "healthy"}


class LocalBlobStore:
    """
    BlobStore on the local filesystem.

    Files live under {root}/{bucket}/{path} and are served at
    {base_url}/{bucket}/{path} by the storage router.
    """

    def __init__(self, root: str, bucket: str, base_url: str = "/storage"):
        self.root = Path(root).resolve()
        self.bucket = bucket
        self.base_url = base_url.rstrip("/")

    def resolve(self, path: str) -> Path:
        """Absolute file location for a blob path; refuses paths escaping the bucket."""
        bucket_dir = self.root / self.bucket
        target = (bucket_dir / path).resolve()
        if bucket_dir.resolve() not in target.parents:
            raise RemoteServiceError(f"Invalid object path: {path}")
        return target

    async def upload(self, path: str, content: bytes, content_type: Optional[str] = None) -> None:
        target = self.resolve(path)
        if target.exists():
            raise RemoteServiceError("The resource already exists")

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(target, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error(f"Failed to store blob {path}: {e}")
            raise RemoteServiceError(str(e)) from e

        logger.info(f"Blob saved: {target}")

    def public_url(self, path: str) -> str:
        return f"{self.base_url}/{self.bucket}/{path}"


class LocalAuth:
    """SessionProvider backed by the users table and signed JWTs."""

    pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

    def __init__(self, session_maker: async_sessionmaker, secret_key: str, expire_minutes: int = 480):
        self.session_maker = session_maker
        self.secret_key = secret_key
        self.expire_minutes = expire_minutes

    def create_access_token(self, user: User) -> AuthSession:
        expire = datetime.now(timezone.utc) + timedelta(minutes=self.expire_minutes)
        token = jwt.encode(
            {"sub": user.id, "email": user.email, "exp": expire},
            self.secret_key,
            algorithm=ALGORITHM
        )
        return AuthSession(
            access_token=token,
            user_id=user.id,
            email=user.email,
            expires_at=int(expire.timestamp()),
        )

    async def sign_up(self, email: str, password: str) -> None:
        async with self.session_maker() as session:
            result = await session.execute(select(User).where(User.email == email))
            if result.scalar_one_or_none():
                raise RemoteServiceError("User already registered")

            session.add(User(email=email, hashed_password=self.pwd_context.hash(password)))
            await session.commit()

        logger.info(f"Created new user: {email}")

    async def sign_in(self, email: str, password: str) -> AuthSession:
        async with self.session_maker() as session:
            result = await session.execute(select(User).where(User.email == email))
            user = result.scalar_one_or_none()

            if not user or not user.is_active:
                logger.warning(f"Login attempt for unknown or inactive user: {email}")
                raise AuthenticationFailed("Invalid login credentials")

            if not self.pwd_context.verify(password, user.hashed_password):
                logger.warning(f"Invalid password for user: {email}")
                raise AuthenticationFailed("Invalid login credentials")

            user.last_login = datetime.now(timezone.utc)
            await session.commit()

            logger.info(f"User authenticated successfully: {email}")
            return self.create_access_token(user)

    async def sign_out(self, session: AuthSession) -> None:
        # Tokens are stateless; the caller drops its copy
        logger.info(f"User signed out: {session.email}")

    async def current_user(self, access_token: str) -> Optional[AuthSession]:
        try:
            payload = jwt.decode(access_token, self.secret_key, algorithms=[ALGORITHM])
        except JWTError:
            return None

        user_id = payload.get("sub")
        if not user_id:
            return None

        async with self.session_maker() as session:
            user = await session.get(User, user_id)

        if not user or not user.is_active:
            return None

        return AuthSession(
            access_token=access_token,
            user_id=user.id,
            email=user.email,
            expires_at=payload.get("exp"),
        )


def create_local_backend(
    session_maker: async_sessionmaker,
    storage_path: str,
    bucket: str,
    secret_key: str,
    expire_minutes: int = 480,
) -> Backend:
    records = LocalRecordStore(session_maker)
    return Backend(
        name="local",
        records=records,
        blobs=LocalBlobStore(storage_path, bucket),
        auth=LocalAuth(session_maker, secret_key, expire_minutes),
        health=records.health,
    )
