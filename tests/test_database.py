import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.pool import StaticPool
from civic_intake.core.database import Database


def test_execute_binds_parameters(database):
    database.execute(
        "INSERT INTO users (id, email, password_hash, full_name, role, is_verified) "
        "VALUES (:id, :email, :password_hash, :full_name, :role, :is_verified)",
        {
            "id": "u-1",
            # Quote characters travel as data, not SQL
            "email": "o'brien@example.com'); DROP TABLE users; --",
            "password_hash": "x",
            "full_name": "Pat O'Brien",
            "role": "citizen",
            "is_verified": True,
        },
    )

    rows = database.execute("SELECT id, full_name FROM users WHERE id = :id", {"id": "u-1"})

    assert rows == [{"id": "u-1", "full_name": "Pat O'Brien"}]
    assert database.execute("SELECT count(*) AS n FROM users") == [{"n": 1}]


def test_transaction_rolls_back_on_error(database):
    with pytest.raises(RuntimeError):
        with database.transaction() as db:
            db.execute(
                text(
                    "INSERT INTO users (id, email, password_hash, full_name, role, is_verified) "
                    "VALUES ('u-2', 'x@example.com', 'x', 'X', 'citizen', 1)"
                )
            )
            raise RuntimeError("boom")

    assert database.execute("SELECT count(*) AS n FROM users") == [{"n": 0}]


def test_closed_handle_can_not_be_used():
    database = Database("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    database.close()
    database.close()

    assert database.closed
    with pytest.raises(RuntimeError):
        database.execute("SELECT 1")
    with pytest.raises(RuntimeError):
        next(database.session())
    with pytest.raises(RuntimeError):
        with database.transaction():
            pass


def test_missing_table_raises_database_error(database):
    with pytest.raises(OperationalError):
        database.execute("SELECT * FROM not_a_table")


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}
