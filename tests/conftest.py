# -*- coding: utf-8 -*-
"""
Shared test fixtures and helpers for the offline circulation test suite.
"""

import os
import sqlite3
import sys
from decimal import Decimal

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), os.pardir))

from src.core import config_loader  # noqa: E402

HEADER_1_0 = "Version=1.0\tGenerator=x\tGeneratorVersion=1.0"


def make_koc_text(command_lines, header=HEADER_1_0, terminator="\n"):
    """Full KOC file content from a header and command lines."""
    return terminator.join([header] + list(command_lines)) + terminator


def write_koc(directory, filename, command_lines, header=HEADER_1_0, terminator="\n"):
    """Write a KOC file into *directory* (a pathlib.Path) and return its path."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / filename
    path.write_bytes(make_koc_text(command_lines, header, terminator).encode("utf-8"))
    return path


def seed_library(db):
    """Two branches, two patrons and three items."""
    db.add_branch("CPL", "Centerville")
    db.add_branch("MPL", "Midway")
    db.add_borrower("CARD1", surname="Reader", branchcode="CPL")
    db.add_borrower("CARD2", surname="Lender", branchcode="MPL")
    db.add_item("BC1", homebranch="CPL")
    db.add_item("BC2", homebranch="CPL")
    db.add_item("BC3", homebranch="MPL")


def issue_rows(db, borrowernumber=None, open_only=False):
    """Rows of the issues table, read over a second connection."""
    sql = ("SELECT issue_id, borrowernumber, itemnumber, branchcode, issuedate, "
           "returndate FROM issues WHERE 1 = 1")
    params = []
    if borrowernumber is not None:
        sql += " AND borrowernumber = ?"
        params.append(borrowernumber)
    if open_only:
        sql += " AND returndate IS NULL"
    conn = sqlite3.connect(db.path)
    try:
        return conn.execute(sql + " ORDER BY issue_id", params).fetchall()
    finally:
        conn.close()


def add_fine(db, borrowernumber, amount):
    conn = sqlite3.connect(db.path, isolation_level=None)
    try:
        conn.execute(
            "INSERT INTO accountlines (borrowernumber, amount, description, timestamp) "
            "VALUES (?, ?, 'Fine', '2024-01-01 00:00:00')", (borrowernumber, amount))
    finally:
        conn.close()


def account_balance(db, borrowernumber):
    """Debits minus payments for one patron, as a Decimal."""
    conn = sqlite3.connect(db.path)
    try:
        rows = conn.execute(
            "SELECT amount FROM accountlines WHERE borrowernumber = ?",
            (borrowernumber,)).fetchall()
    finally:
        conn.close()
    return sum((Decimal(row[0]) for row in rows), Decimal("0"))


def pending_operation(db, operationid):
    for op in db.get_offline_operations():
        if op.operationid == operationid:
            return op
    return None


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Keep tests from picking up config/offline_circ.ini or /etc."""
    monkeypatch.setattr(config_loader, "CONFIG_SEARCH_PATHS", [])
    config_loader.reset_circ_config()
    yield
    config_loader.reset_circ_config()


@pytest.fixture
def db(tmp_path):
    """Connected DatabaseManager with the schema created."""
    from src.storage.database import DatabaseManager
    mgr = DatabaseManager(str(tmp_path / "circ.db"))
    mgr.connect()
    mgr.ensure_schema()
    yield mgr
    mgr.close()


@pytest.fixture
def library_db(db):
    seed_library(db)
    return db
