"""
RowStore: acceso a tablas por nombre (select / insert / update / delete / rpc).

Es la unica puerta a la base de datos que usan los servicios. Se crea uno por
request (ver ``core.deps.get_store``) y se pasa explicitamente a cada funcion
de servicio; no hay cliente global.

Semantica:
- Fuera de ``transaction()`` cada escritura hace commit por su cuenta.
- ``transaction()`` agrupa varias llamadas en un solo commit; si algo falla
  dentro del bloque se hace rollback de todo.
- ``update(..., expect={...})`` solo aplica si las columnas esperadas siguen
  teniendo ese valor (compare-and-swap). Devuelve None si no hubo match.
- Las lecturas reintentan errores transitorios con backoff exponencial.
  Las escrituras no se reintentan nunca.
"""
import logging
import time
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from sqlalchemy import delete as sa_delete
from sqlalchemy import insert as sa_insert
from sqlalchemy import select as sa_select
from sqlalchemy import update as sa_update
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from cibercontrol.core.config import settings
from cibercontrol.core.errors import ConflictError, StoreError
from cibercontrol.models import Base


logger = logging.getLogger(__name__)

Row = Dict[str, Any]

PROCEDURES: Dict[str, Callable[..., List[Row]]] = {}


def procedure(name: str):
    """Registra una funcion como procedimiento invocable con ``RowStore.rpc``."""

    def decorator(fn):
        PROCEDURES[name] = fn
        return fn

    return decorator


def _row_to_dict(row) -> Row:
    if row is None:
        return {}
    if hasattr(row, "_mapping"):
        return dict(row._mapping)
    return dict(row)


class RowStore:
    def __init__(
        self,
        db: Session,
        read_retries: Optional[int] = None,
        retry_backoff: Optional[float] = None,
    ):
        self.db = db
        self.read_retries = settings.store_read_retries if read_retries is None else read_retries
        self.retry_backoff = settings.store_retry_backoff if retry_backoff is None else retry_backoff
        self._tx_depth = 0

    # ------------------------------------------------------------------ helpers

    def _table(self, name: str):
        table = Base.metadata.tables.get(name)
        if table is None:
            raise StoreError(f"Unknown table: {name}")
        return table

    def _column(self, table, name: str):
        if name not in table.c:
            raise StoreError(f"Unknown column {table.name}.{name}")
        return table.c[name]

    def _where(self, table, stmt, eq=None, gte=None, lte=None, lt=None, in_=None):
        for col, value in (eq or {}).items():
            column = self._column(table, col)
            stmt = stmt.where(column.is_(None) if value is None else column == value)
        for col, value in (gte or {}).items():
            stmt = stmt.where(self._column(table, col) >= value)
        for col, value in (lte or {}).items():
            stmt = stmt.where(self._column(table, col) <= value)
        for col, value in (lt or {}).items():
            stmt = stmt.where(self._column(table, col) < value)
        for col, values in (in_ or {}).items():
            stmt = stmt.where(self._column(table, col).in_(list(values)))
        return stmt

    @property
    def in_transaction(self) -> bool:
        return self._tx_depth > 0

    @contextmanager
    def transaction(self):
        """Agrupa varias escrituras en un solo commit (anidable)."""
        if self.in_transaction:
            self._tx_depth += 1
            try:
                yield self
            finally:
                self._tx_depth -= 1
            return

        self._tx_depth = 1
        try:
            yield self
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StoreError(f"Transaction failed: {exc}") from exc
        except Exception:
            self.db.rollback()
            raise
        finally:
            self._tx_depth = 0

    def _read(self, fn: Callable[[], Any]) -> Any:
        attempt = 0
        while True:
            try:
                return fn()
            except OperationalError as exc:
                if self.in_transaction or attempt >= self.read_retries:
                    logger.error("store read failed after %s attempt(s)", attempt + 1, exc_info=exc)
                    raise StoreError(f"Store unavailable: {exc.orig}") from exc
                delay = self.retry_backoff * (2 ** attempt)
                logger.warning("store read failed (%s), retrying in %.2fs", exc.orig, delay)
                self.db.rollback()
                time.sleep(delay)
                attempt += 1
            except SQLAlchemyError as exc:
                logger.error("store read failed", exc_info=exc)
                raise StoreError(f"Store read failed: {exc}") from exc

    def _write(self, fn: Callable[[], Any]) -> Any:
        try:
            result = fn()
            if not self.in_transaction:
                self.db.commit()
            return result
        except IntegrityError as exc:
            if not self.in_transaction:
                self.db.rollback()
            message = str(exc.orig)
            if "unique" in message.lower() or "duplicate" in message.lower():
                logger.warning("store write rejected by unique constraint: %s", message)
                raise ConflictError(f"Duplicate record: {message}") from exc
            logger.error("store write violated a constraint", exc_info=exc)
            raise StoreError(f"Constraint violation: {message}") from exc
        except SQLAlchemyError as exc:
            if not self.in_transaction:
                self.db.rollback()
            logger.error("store write failed", exc_info=exc)
            raise StoreError(f"Store write failed: {exc}") from exc

    # --------------------------------------------------------------------- reads

    def select(
        self,
        table_name: str,
        *,
        eq: Optional[Mapping[str, Any]] = None,
        gte: Optional[Mapping[str, Any]] = None,
        lte: Optional[Mapping[str, Any]] = None,
        lt: Optional[Mapping[str, Any]] = None,
        in_: Optional[Mapping[str, Iterable[Any]]] = None,
        order_by: Optional[str] = None,
        desc: bool = False,
        limit: Optional[int] = None,
    ) -> List[Row]:
        table = self._table(table_name)
        stmt = self._where(table, sa_select(table), eq=eq, gte=gte, lte=lte, lt=lt, in_=in_)
        if order_by:
            column = self._column(table, order_by)
            stmt = stmt.order_by(column.desc() if desc else column.asc())
        else:
            stmt = stmt.order_by(table.c.id.asc())
        if limit is not None:
            stmt = stmt.limit(limit)
        return self._read(lambda: [_row_to_dict(r) for r in self.db.execute(stmt).fetchall()])

    def get(self, table_name: str, row_id: Any) -> Optional[Row]:
        rows = self.select(table_name, eq={"id": row_id}, limit=1)
        return rows[0] if rows else None

    def first(self, table_name: str, **filters) -> Optional[Row]:
        rows = self.select(table_name, limit=1, **filters)
        return rows[0] if rows else None

    # -------------------------------------------------------------------- writes

    def insert(self, table_name: str, row: Mapping[str, Any]) -> Row:
        table = self._table(table_name)
        for col in row:
            self._column(table, col)

        def _do():
            result = self.db.execute(sa_insert(table).values(**row))
            new_id = result.inserted_primary_key[0]
            return _row_to_dict(self.db.execute(sa_select(table).where(table.c.id == new_id)).first())

        return self._write(_do)

    def update(
        self,
        table_name: str,
        row_id: Any,
        patch: Mapping[str, Any],
        expect: Optional[Mapping[str, Any]] = None,
    ) -> Optional[Row]:
        table = self._table(table_name)
        for col in patch:
            self._column(table, col)
        stmt = self._where(table, sa_update(table).where(table.c.id == row_id), eq=expect)
        stmt = stmt.values(**patch)

        def _do():
            result = self.db.execute(stmt)
            if result.rowcount == 0:
                return None
            return _row_to_dict(self.db.execute(sa_select(table).where(table.c.id == row_id)).first())

        return self._write(_do)

    def delete(self, table_name: str, row_id: Any) -> None:
        table = self._table(table_name)
        self._write(lambda: self.db.execute(sa_delete(table).where(table.c.id == row_id)))

    def delete_where(self, table_name: str, *, eq: Mapping[str, Any]) -> int:
        if not eq:
            raise StoreError("delete_where requires at least one filter")
        table = self._table(table_name)
        stmt = self._where(table, sa_delete(table), eq=eq)
        return self._write(lambda: self.db.execute(stmt).rowcount)

    # ----------------------------------------------------------------------- rpc

    def rpc(self, name: str, params: Optional[Mapping[str, Any]] = None) -> List[Row]:
        # Los procedimientos se registran al importar el modulo
        from cibercontrol.core import procedures  # noqa: F401

        fn = PROCEDURES.get(name)
        if fn is None:
            raise StoreError(f"Unknown procedure: {name}")
        return fn(self, **dict(params or {}))
