from __future__ import annotations

import os
from dataclasses import asdict
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from psycopg2 import sql
from supabase import Client

from src.domain.entities.profile import ProfileEntity, UserRole
from src.infrastructure.database.postgres_client import get_postgres_client, local_db_enabled
from src.infrastructure.database.supabase_client import profile_table

# module-level in-memory store for disabled mode
_MEM_PROFILES: dict[str, ProfileEntity] = {}


def _parse_ts(value: Any) -> datetime | None:
    if isinstance(value, str):
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    return value


def _to_db(values: dict[str, Any]) -> dict[str, Any]:
    out = {}
    for key, value in values.items():
        if isinstance(value, Enum):
            value = value.value
        elif isinstance(value, datetime):
            value = value.isoformat()
        out[key] = value
    return out


class ProfileRepository:
    """Row store for ``user_profiles``, keyed by the auth identity id."""

    def __init__(self, client: Client | None) -> None:
        self.client = client
        self.table = profile_table()
        self.disabled = os.getenv("SUPABASE_DISABLED", "0") == "1"
        self.use_local_db = local_db_enabled()
        self.pg_client = get_postgres_client() if self.use_local_db else None

    def _row_to_entity(self, row: dict) -> ProfileEntity:
        """Convert database row to ProfileEntity."""
        return ProfileEntity(
            id=str(row["id"]),
            email=row.get("email") or "",
            role=UserRole(row.get("role") or UserRole.CITIZEN.value),
            is_verified=bool(row.get("is_verified", False)),
            full_name=row.get("full_name"),
            avatar_url=row.get("avatar_url"),
            bio=row.get("bio"),
            location=row.get("location"),
            created_at=_parse_ts(row.get("created_at")),
            updated_at=_parse_ts(row.get("updated_at")),
        )

    def get(self, user_id: str) -> ProfileEntity | None:
        # PostgreSQL mode
        if self.use_local_db and self.pg_client:
            query = sql.SQL("SELECT * FROM {} WHERE id = %s").format(sql.Identifier(self.table))
            try:
                row = self.pg_client.fetch_one(query, (user_id,))
            except Exception as exc:
                raise RuntimeError(f"PostgreSQL fetch profile failed: {exc}") from exc
            return self._row_to_entity(row) if row else None

        # In-memory mode
        if self.disabled or self.client is None:
            return _MEM_PROFILES.get(user_id)

        # Supabase mode
        try:
            res = self.client.table(self.table).select("*").eq("id", user_id).limit(1).execute()
        except Exception as exc:
            raise RuntimeError(f"DB fetch profile failed: {exc}") from exc
        rows = res.data or []
        return self._row_to_entity(rows[0]) if rows else None

    def create(self, user_id: str, email: str, fields: dict[str, Any]) -> ProfileEntity:
        values = _to_db({"id": user_id, "email": email, **fields})

        # PostgreSQL mode
        if self.use_local_db and self.pg_client:
            columns = list(values)
            query = sql.SQL("INSERT INTO {} ({}) VALUES ({}) RETURNING *").format(
                sql.Identifier(self.table),
                sql.SQL(", ").join(map(sql.Identifier, columns)),
                sql.SQL(", ").join(sql.Placeholder() * len(columns)),
            )
            try:
                row = self.pg_client.fetch_one(query, tuple(values[c] for c in columns))
            except Exception as exc:
                raise RuntimeError(f"PostgreSQL insert profile failed: {exc}") from exc
            if row is None:
                raise RuntimeError("PostgreSQL insert profile returned no row")
            return self._row_to_entity(row)

        # In-memory mode
        if self.disabled or self.client is None:
            if user_id in _MEM_PROFILES:
                raise RuntimeError(f"Profile {user_id} already exists")
            now = datetime.now(UTC)
            entity = self._row_to_entity({**values, "created_at": now, "updated_at": now})
            _MEM_PROFILES[user_id] = entity
            return entity

        # Supabase mode
        try:
            res = self.client.table(self.table).insert(values).execute()
        except Exception as exc:
            raise RuntimeError(f"DB insert profile failed: {exc}") from exc
        if not res.data:
            raise RuntimeError("DB insert profile returned no row")
        return self._row_to_entity(res.data[0])

    def update(self, user_id: str, fields: dict[str, Any]) -> ProfileEntity | None:
        """Apply ``fields`` to the row and return it, or None if no row matched."""
        values = _to_db(fields)

        # PostgreSQL mode
        if self.use_local_db and self.pg_client:
            assignments = sql.SQL(", ").join(
                sql.SQL("{} = %s").format(sql.Identifier(column)) for column in values
            )
            query = sql.SQL("UPDATE {} SET {} WHERE id = %s RETURNING *").format(
                sql.Identifier(self.table), assignments
            )
            try:
                row = self.pg_client.fetch_one(query, (*values.values(), user_id))
            except Exception as exc:
                raise RuntimeError(f"PostgreSQL update profile failed: {exc}") from exc
            return self._row_to_entity(row) if row else None

        # In-memory mode
        if self.disabled or self.client is None:
            current = _MEM_PROFILES.get(user_id)
            if current is None:
                return None
            row = {**_to_db(asdict(current)), **values}
            updated = self._row_to_entity(row)
            _MEM_PROFILES[user_id] = updated
            return updated

        # Supabase mode
        try:
            res = self.client.table(self.table).update(values).eq("id", user_id).execute()
        except Exception as exc:
            raise RuntimeError(f"DB update profile failed: {exc}") from exc
        rows = res.data or []
        return self._row_to_entity(rows[0]) if rows else None
