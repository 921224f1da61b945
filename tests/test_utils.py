from datetime import date, datetime, timezone

import pytest
from sqlalchemy import Integer, String, event, select
from werkzeug.exceptions import BadRequest, Forbidden, NotFound

from models import storage
from models.address import Address
from models.user import User
from utils.pagination import envelope, paginate, parse_pagination
from utils.query_builder import FilterSet, day_bounds, partial_update
from utils.security import TokenError, create_access_token, decode_token, hash_password, verify_password


class StatementRecorder:
    def __init__(self, engine):
        self.engine = engine
        self.statements = []

    def __enter__(self):
        event.listen(self.engine, "before_cursor_execute", self._record)
        return self

    def __exit__(self, *exc):
        event.remove(self.engine, "before_cursor_execute", self._record)

    def _record(self, conn, cursor, statement, parameters, context, executemany):
        self.statements.append(statement)

    def matching(self, prefix):
        return [s for s in self.statements if s.lstrip().upper().startswith(prefix)]


def _user(session, email="owner@example.com"):
    user = User(email=email, password_hash=hash_password("secret1"), first_name="Ana", last_name="Lopez")
    session.add(user)
    session.commit()
    return user


def _address(session, user):
    address = Address(user_id=user.id, street="Calle 1", city="Lima", postal_code="15001", country="PE")
    session.add(address)
    session.commit()
    return address


# ---------------- pagination ----------------

def test_envelope_computes_total_pages():
    body = envelope([1, 2], total=21, page=3, limit=10)
    assert body == {"data": [1, 2], "total": 21, "page": 3, "limit": 10, "totalPages": 3}
    assert envelope([], 0, 1, 10)["totalPages"] == 0


def test_parse_pagination_defaults_and_clamps(app):
    with app.test_request_context("/"):
        assert parse_pagination() == (1, app.config["DEFAULT_PAGE_LIMIT"])
    with app.test_request_context("/?page=0&limit=100000"):
        assert parse_pagination() == (1, app.config["MAX_PAGE_LIMIT"])
    with app.test_request_context("/?page=4&limit=0"):
        assert parse_pagination() == (4, 1)


def test_parse_pagination_rejects_non_integers(app):
    with app.test_request_context("/?page=two"):
        with pytest.raises(BadRequest):
            parse_pagination()


def test_parse_pagination_rejects_offsets_beyond_64_bits(app):
    with app.test_request_context("/?page=99999999999999999999"):
        with pytest.raises(BadRequest):
            parse_pagination()
    with app.test_request_context("/?page=1000000&limit=100"):
        assert parse_pagination() == (1000000, 100)


def test_paginate_counts_the_filtered_statement(session):
    for i in range(5):
        _user(session, email=f"user{i}@example.com")
    stmt = select(User).where(User.email.like("user%")).order_by(User.email)

    rows, total = paginate(session, stmt, page=2, limit=2)

    assert total == 5
    assert [u.email for u in rows] == ["user2@example.com", "user3@example.com"]


# ---------------- partial_update ----------------

def test_partial_update_with_empty_payload_issues_no_update(session):
    user = _user(session)
    address = _address(session, user)

    with StatementRecorder(storage.engine) as recorder:
        result = partial_update(session, Address, address.id, {})

    assert result.id == address.id
    assert recorder.matching("UPDATE") == []


def test_partial_update_writes_only_present_keys(session):
    user = _user(session)
    address = _address(session, user)

    updated = partial_update(session, Address, address.id, {"city": "Cusco", "state": None})
    session.commit()

    assert updated.city == "Cusco"
    assert updated.state is None
    assert updated.street == "Calle 1"


def test_partial_update_writes_false_values(session):
    user = _user(session)

    updated = partial_update(session, User, user.id, {"is_active": False})
    session.commit()

    assert updated.is_active is False


def test_partial_update_refuses_unknown_columns(session):
    user = _user(session)
    with pytest.raises(BadRequest):
        partial_update(session, User, user.id, {"password_hash": "x"})


def test_partial_update_missing_row(session):
    with pytest.raises(NotFound):
        partial_update(session, Address, "does-not-exist", {"city": "X"})


def test_partial_update_owner_mismatch_is_forbidden(session):
    owner = _user(session)
    other = _user(session, email="other@example.com")
    address = _address(session, owner)

    with pytest.raises(Forbidden):
        partial_update(session, Address, address.id, {"city": "X"}, owner_column=Address.user_id, owner_id=other.id)
    session.rollback()
    with pytest.raises(Forbidden):
        partial_update(session, Address, address.id, {}, owner_column=Address.user_id, owner_id=other.id)

    assert session.get(Address, address.id).city == "Lima"


# ---------------- FilterSet ----------------

def _bound_names(filters):
    compiled = filters.apply(select(User.id)).compile()
    return set(compiled.params)


def test_filter_set_parameters_do_not_depend_on_supplied_values():
    empty = FilterSet()
    empty.add("role", None, String(), lambda p: User.role == p)
    empty.add("min_len", None, Integer(), lambda p: User.first_name != p)

    filled = FilterSet()
    filled.add("role", "admin", String(), lambda p: User.role == p)
    filled.add("min_len", 3, Integer(), lambda p: User.first_name != p)

    assert _bound_names(empty) == _bound_names(filled) == {"role", "min_len"}
    assert filled.params == {"role": "admin", "min_len": 3}


def test_filter_set_missing_value_is_a_tautology(session):
    _user(session, email="a@example.com")
    _user(session, email="b@example.com")

    no_filter = FilterSet().add("role", None, String(), lambda p: User.role == p)
    admins = FilterSet().add("role", "admin", String(), lambda p: User.role == p)

    assert len(session.execute(no_filter.apply(select(User.id))).all()) >= 2
    emails = session.execute(admins.apply(select(User.email))).scalars().all()
    assert "a@example.com" not in emails


def test_day_bounds_cover_whole_days():
    lower, upper = day_bounds(date(2024, 1, 1), date(2024, 1, 31))
    assert lower == datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert upper == datetime(2024, 2, 1, tzinfo=timezone.utc)
    assert day_bounds(None, None) == (None, None)


# ---------------- security ----------------

def test_password_hash_round_trip():
    hashed = hash_password("s3cret!")
    assert hashed.startswith("$argon2")
    assert verify_password("s3cret!", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("s3cret!", "not-a-hash")


def test_access_token_claims(session, app):
    user = _user(session)
    with app.app_context():
        token = create_access_token(user)
        claims = decode_token(token)
        assert claims["sub"] == user.id
        assert claims["role"] == "customer"
        assert claims["type"] == "access"
        with pytest.raises(TokenError):
            decode_token(token + "x")
        with pytest.raises(TokenError):
            decode_token(token, expected_type="refresh")
