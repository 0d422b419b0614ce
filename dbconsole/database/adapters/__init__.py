"""
Database adapters - one implementation of DatabaseAdapter per engine.

- mysql.py       : direct MySQL (PyMySQL)
- mysql_proxy.py : MySQL over an HTTP proxy (requests)
- postgresql.py  : PostgreSQL (psycopg2)
- sqlite.py      : SQLite files
"""
from dbconsole.database.adapters.base import DatabaseAdapter
from dbconsole.database.adapters.mysql import MySQLAdapter
from dbconsole.database.adapters.mysql_proxy import MySQLProxyAdapter
from dbconsole.database.adapters.postgresql import PostgreSQLAdapter
from dbconsole.database.adapters.sqlite import SQLiteAdapter

__all__ = [
    "DatabaseAdapter",
    "MySQLAdapter",
    "MySQLProxyAdapter",
    "PostgreSQLAdapter",
    "SQLiteAdapter",
]
