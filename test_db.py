# test_db.py
from qrmenu.db import connect_args_for


def test_sqlite_waits_are_bounded():
    args = connect_args_for("sqlite:///./qrmenu.db", 7.5)
    assert args == {"check_same_thread": False, "timeout": 7.5}


def test_postgres_statement_timeout():
    args = connect_args_for("postgresql+psycopg://u:p@db/qrmenu", 2.5)
    assert args == {"options": "-c statement_timeout=2500"}


def test_unknown_driver_gets_no_options():
    assert connect_args_for("mysql://u:p@db/qrmenu", 5) == {}

