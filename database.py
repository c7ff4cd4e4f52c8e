import os
import time
import logging
from typing import Optional, Union

import pandas as pd
import streamlit as st
from sqlalchemy import create_engine, event, text, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.sql import Executable
from dotenv import load_dotenv

from schema import metadata

load_dotenv()
logger = logging.getLogger(__name__)

Statement = Union[str, Executable]


def get_database_url() -> str:
    db_url = os.getenv("DATABASE_URL", "").strip()
    if not db_url:
        try:
            db_url = str(st.secrets.get("DATABASE_URL", "")).strip()
        except Exception as e:
            logger.debug(f"st.secrets indisponível: {e}")
            db_url = ""

    if not db_url:
        raise RuntimeError("DATABASE_URL is not set. (.env env var or Streamlit secrets)")

    # Supabase entrega o esquema antigo "postgres://", que o SQLAlchemy 2 recusa
    if db_url.startswith("postgres://"):
        db_url = "postgresql://" + db_url[len("postgres://"):]

    if db_url.startswith("postgresql") and "sslmode=" not in db_url:
        joiner = "&" if "?" in db_url else "?"
        db_url = db_url + f"{joiner}sslmode=require"

    return db_url


def _sqlite_foreign_keys(dbapi_conn, _record) -> None:
    # SQLite só aplica FOREIGN KEY / ON DELETE com o pragma ligado
    cur = dbapi_conn.cursor()
    cur.execute("PRAGMA foreign_keys=ON")
    cur.close()


def make_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        engine = create_engine(url, future=True)
        event.listen(engine, "connect", _sqlite_foreign_keys)
        return engine
    connect_args = {
        "connect_timeout": 10,
        "keepalives": 1,
        "keepalives_idle": 30,
        "keepalives_interval": 10,
        "keepalives_count": 5,
    }
    return create_engine(
        url,
        connect_args=connect_args,
        pool_pre_ping=True,
        pool_size=2,
        max_overflow=2,
        pool_timeout=30,
        pool_recycle=300,
        pool_use_lifo=True,
        future=True,
    )


@st.cache_resource(show_spinner=False)
def get_engine() -> Engine:
    try:
        return make_engine(get_database_url())
    except Exception as e:
        logger.error(f"Engine creation failed: {e}")
        raise


def _as_statement(sql: Statement):
    return text(sql) if isinstance(sql, str) else sql


def _execute(conn, stmt, params: Optional[dict]):
    return conn.execute(stmt) if params is None else conn.execute(stmt, params)


def sql_read(engine, sql: Statement, params: Optional[dict] = None, retries: int = 2) -> pd.DataFrame:
    """Leitura em DataFrame. Só falhas de conexão são re-tentadas; o resto sobe direto."""
    stmt = _as_statement(sql)
    for i in range(retries + 1):
        try:
            with engine.connect() as conn:
                return pd.read_sql(stmt, conn, params=params)
        except OperationalError as e:
            if i >= retries:
                logger.error(f"[DB Read Final Fail] Failed to read DB: {e}")
                raise
            logger.warning(f"[DB Read Retry {i}] SQL Execution failed: {e}")
            engine.dispose()
            time.sleep(0.35 * (2 ** i))


def sql_first(engine, sql: Statement, params: Optional[dict] = None) -> Optional[dict]:
    with engine.connect() as conn:
        row = _execute(conn, _as_statement(sql), params).first()
    return None if row is None else dict(row._mapping)


def sql_scalar(engine, sql: Statement, params: Optional[dict] = None):
    with engine.connect() as conn:
        return _execute(conn, _as_statement(sql), params).scalar()


def sql_exec(engine, sql: Statement, params: Optional[dict] = None) -> int:
    """Executa uma mutação na própria transação e devolve o rowcount. Sem retry."""
    try:
        with engine.begin() as conn:
            return _execute(conn, _as_statement(sql), params).rowcount
    except SQLAlchemyError as e:
        logger.error(f"DB Execution Failed: {e}")
        raise


def sql_write(engine, sql: Statement, params: Optional[dict] = None) -> list:
    """Mutação com RETURNING; devolve as linhas afetadas como dicts."""
    try:
        with engine.begin() as conn:
            result = _execute(conn, _as_statement(sql), params)
            return [dict(r._mapping) for r in result]
    except SQLAlchemyError as e:
        logger.error(f"DB Write Failed: {e}")
        raise


def db_ping(engine, retries: int = 2) -> None:
    for i in range(retries + 1):
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return
        except OperationalError as e:
            if i >= retries:
                raise
            logger.warning(f"[DB Ping Retry {i}] {e}")
            engine.dispose()
            time.sleep(0.35 * (2 ** i))


def table_exists(engine, table: str) -> bool:
    try:
        return inspect(engine).has_table(table)
    except SQLAlchemyError as e:
        logger.warning(f"table_exists({table}) failed: {e}")
        return False


def ensure_schema(engine) -> list:
    """Cria as tabelas que faltam. Devolve os nomes das que não existiam."""
    missing = [t.name for t in metadata.sorted_tables if not table_exists(engine, t.name)]
    metadata.create_all(engine, checkfirst=True)
    if missing:
        logger.info(f"Tabelas criadas: {', '.join(missing)}")
    return missing
