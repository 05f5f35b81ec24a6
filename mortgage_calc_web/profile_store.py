"""Persistence layer for saved mortgage profiles.

A profile is a named set of mortgage inputs (never a computed schedule). The
store defaults to SQLite for local development, but accepts any
SQLAlchemy-compatible URL.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional
from uuid import uuid4

from sqlalchemy import Column, DateTime, String, Text, create_engine, select
from sqlalchemy.orm import declarative_base, sessionmaker

from mortgage_calc.data_models import MortgageParams

logger = logging.getLogger(__name__)

Base = declarative_base()


class MortgageProfileModel(Base):
    __tablename__ = "mortgage_profiles"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    params_json = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)


@dataclass(frozen=True)
class Profile:
    id: str
    name: str
    params: MortgageParams
    created_at: datetime
    updated_at: datetime


class ProfileStore:
    """Database-backed profile store."""

    def __init__(self, url: str) -> None:
        self._engine = create_engine(url, future=True)
        Base.metadata.create_all(self._engine)
        self._session_factory = sessionmaker(self._engine, expire_on_commit=False, future=True)

    def list_profiles(self) -> List[Profile]:
        with self._session_factory() as session:
            rows: Iterable[MortgageProfileModel] = session.execute(
                select(MortgageProfileModel).order_by(MortgageProfileModel.created_at.asc())
            ).scalars()
            return [self._to_profile(row) for row in rows]

    def get_profile(self, profile_id: str) -> Optional[Profile]:
        if not profile_id:
            return None
        with self._session_factory() as session:
            row = session.get(MortgageProfileModel, profile_id)
            return self._to_profile(row) if row else None

    def create_profile(self, name: str, params: MortgageParams) -> Profile:
        now = datetime.utcnow()
        row = MortgageProfileModel(
            id=uuid4().hex,
            name=name,
            params_json=json.dumps(params.to_dict()),
            created_at=now,
            updated_at=now,
        )
        with self._session_factory() as session:
            session.add(row)
            session.commit()
        logger.info("Created profile %s (%s)", row.id, name)
        return self._to_profile(row)

    def update_profile(
        self,
        profile_id: str,
        *,
        name: Optional[str] = None,
        params: Optional[MortgageParams] = None,
    ) -> Optional[Profile]:
        with self._session_factory() as session:
            row = session.get(MortgageProfileModel, profile_id)
            if row is None:
                return None
            if name is not None:
                row.name = name
            if params is not None:
                row.params_json = json.dumps(params.to_dict())
            row.updated_at = datetime.utcnow()
            session.commit()
            logger.info("Updated profile %s", profile_id)
            return self._to_profile(row)

    def delete_profile(self, profile_id: str) -> bool:
        with self._session_factory() as session:
            row = session.get(MortgageProfileModel, profile_id)
            if row is None:
                return False
            session.delete(row)
            session.commit()
        logger.info("Deleted profile %s", profile_id)
        return True

    def clear_profiles(self) -> None:
        with self._session_factory() as session:
            session.execute(MortgageProfileModel.__table__.delete())
            session.commit()

    @staticmethod
    def _to_profile(row: MortgageProfileModel) -> Profile:
        return Profile(
            id=row.id,
            name=row.name,
            params=MortgageParams.from_dict(json.loads(row.params_json)),
            created_at=row.created_at,
            updated_at=row.updated_at,
        )


def create_store_from_env(url: str | None) -> ProfileStore:
    return ProfileStore(url or "sqlite:///mortgage_profiles.sqlite3")
