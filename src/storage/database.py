# -*- coding: utf-8 -*-
"""
Database layer for the offline circulation tools.

SQLite-backed storage for the pieces of the catalogue the offline
operations touch: branches, patrons (borrowers), items, checkouts
(issues), patron account lines, and the queue of pending offline
operations that the importer fills and the processor drains.

Money amounts are stored as decimal strings so balances add up exactly.
"""

import sqlite3
import time
from decimal import Decimal

from src.core.exceptions import DatabaseError
from src.core.types import PendingOperation

# -- SQL templates --

_SCHEMA = [
    "CREATE TABLE IF NOT EXISTS branches (branchcode TEXT PRIMARY KEY, "
    "branchname TEXT)",
    "CREATE TABLE IF NOT EXISTS borrowers (borrowernumber INTEGER PRIMARY KEY "
    "AUTOINCREMENT, cardnumber TEXT UNIQUE NOT NULL, surname TEXT, firstname TEXT, "
    "branchcode TEXT)",
    "CREATE TABLE IF NOT EXISTS items (itemnumber INTEGER PRIMARY KEY AUTOINCREMENT, "
    "barcode TEXT UNIQUE NOT NULL, homebranch TEXT, holdingbranch TEXT, onloan TEXT)",
    "CREATE TABLE IF NOT EXISTS issues (issue_id INTEGER PRIMARY KEY AUTOINCREMENT, "
    "borrowernumber INTEGER NOT NULL, itemnumber INTEGER NOT NULL, branchcode TEXT, "
    "issuedate TEXT NOT NULL, returndate TEXT)",
    "CREATE TABLE IF NOT EXISTS accountlines (accountlines_id INTEGER PRIMARY KEY "
    "AUTOINCREMENT, borrowernumber INTEGER NOT NULL, amount TEXT NOT NULL, "
    "description TEXT, branchcode TEXT, interface TEXT, timestamp TEXT NOT NULL)",
    "CREATE TABLE IF NOT EXISTS pending_offline_operations (operationid INTEGER "
    "PRIMARY KEY AUTOINCREMENT, userid TEXT, branchcode TEXT NOT NULL, "
    "timestamp TEXT NOT NULL, action TEXT NOT NULL, barcode TEXT, cardnumber TEXT, "
    "amount TEXT)",
]

_PENDING_COLUMNS = (
    "operationid", "userid", "branchcode", "timestamp", "action",
    "barcode", "cardnumber", "amount",
)


def _now():
    return time.strftime("%Y-%m-%d %H:%M:%S")


class QueryBuilder(object):
    """Fluent parameterised SQL builder."""

    def __init__(self, table):
        self._table = table
        self._columns = ["*"]
        self._wheres, self._params = [], []
        self._order = None

    def select(self, *cols):
        self._columns = list(cols)
        return self

    def where(self, clause, *params):
        self._wheres.append(clause)
        self._params.extend(params)
        return self

    def order_by(self, col, direction="ASC"):
        self._order = "%s %s" % (col, direction)
        return self

    def build(self):
        sql = "SELECT %s FROM %s" % (", ".join(self._columns), self._table)
        if self._wheres:
            sql += " WHERE " + " AND ".join(self._wheres)
        if self._order:
            sql += " ORDER BY " + self._order
        return sql, tuple(self._params)


class TransactionContext(object):
    """Commit-on-success, rollback-on-failure context manager."""

    def __init__(self, connection):
        self._conn = connection

    def __enter__(self):
        self._conn.execute("BEGIN")
        return self._conn

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            try:
                self._conn.execute("COMMIT")
            except sqlite3.Error as e:
                self._conn.execute("ROLLBACK")
                raise DatabaseError("commit failed: %s" % e)
        else:
            try:
                self._conn.execute("ROLLBACK")
            except sqlite3.Error as e:
                print("  [txn] ROLLBACK failed: %s" % e)
            return False


class DatabaseManager(object):
    """SQLite storage engine.

    The connection runs in autocommit mode; single statements commit
    immediately and ``transaction()`` groups several of them.
    """

    def __init__(self, db_path, timeout=10):
        self._db_path = db_path
        self._conn = None
        self._timeout = timeout

    @property
    def path(self):
        return self._db_path

    def connect(self):
        try:
            self._conn = sqlite3.connect(
                self._db_path, timeout=self._timeout, isolation_level=None)
        except sqlite3.Error as e:
            raise DatabaseError("cannot open %s: %s" % (self._db_path, e))

    def close(self):
        if self._conn:
            self._conn.close()
            self._conn = None

    def __enter__(self):
        self.connect()
        self.ensure_schema()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def ensure_schema(self):
        try:
            for s in _SCHEMA:
                self._require_conn().execute(s)
        except sqlite3.Error as e:
            raise DatabaseError("schema creation failed: %s" % e)

    def transaction(self):
        return TransactionContext(self._require_conn())

    def _require_conn(self):
        if self._conn is None:
            raise DatabaseError("not connected")
        return self._conn

    def _execute(self, sql, params=()):
        try:
            return self._require_conn().execute(sql, params)
        except sqlite3.Error as e:
            raise DatabaseError("%s (%s)" % (e, sql.split(" (")[0]))

    def _fetchone(self, sql, params=()):
        return self._execute(sql, params).fetchone()

    # ---------------------------------------------------------------
    # Branches, patrons, items
    # ---------------------------------------------------------------

    def add_branch(self, branchcode, branchname=None):
        self._execute(
            "INSERT OR REPLACE INTO branches (branchcode, branchname) VALUES (?, ?)",
            (branchcode, branchname or branchcode))

    def find_branch(self, branchcode):
        return self._fetchone(
            "SELECT branchcode, branchname FROM branches WHERE branchcode = ?",
            (branchcode,))

    def add_borrower(self, cardnumber, surname=None, firstname=None, branchcode=None):
        cur = self._execute(
            "INSERT INTO borrowers (cardnumber, surname, firstname, branchcode) "
            "VALUES (?, ?, ?, ?)", (cardnumber, surname, firstname, branchcode))
        return cur.lastrowid

    def find_borrower_by_cardnumber(self, cardnumber):
        """Return ``(borrowernumber, cardnumber, surname, firstname,
        branchcode)`` or None."""
        if not cardnumber:
            return None
        return self._fetchone(
            "SELECT borrowernumber, cardnumber, surname, firstname, branchcode "
            "FROM borrowers WHERE cardnumber = ?", (cardnumber,))

    def add_item(self, barcode, homebranch=None):
        cur = self._execute(
            "INSERT INTO items (barcode, homebranch, holdingbranch) VALUES (?, ?, ?)",
            (barcode, homebranch, homebranch))
        return cur.lastrowid

    def find_item_by_barcode(self, barcode):
        """Return ``(itemnumber, barcode, homebranch, holdingbranch,
        onloan)`` or None."""
        if not barcode:
            return None
        return self._fetchone(
            "SELECT itemnumber, barcode, homebranch, holdingbranch, onloan "
            "FROM items WHERE barcode = ?", (barcode,))

    # ---------------------------------------------------------------
    # Checkouts
    # ---------------------------------------------------------------

    def get_open_issue(self, itemnumber):
        """Return ``(issue_id, borrowernumber, itemnumber, branchcode,
        issuedate)`` for the item's current checkout, or None."""
        return self._fetchone(
            "SELECT issue_id, borrowernumber, itemnumber, branchcode, issuedate "
            "FROM issues WHERE itemnumber = ? AND returndate IS NULL", (itemnumber,))

    def add_issue(self, borrowernumber, itemnumber, branchcode, issuedate):
        cur = self._execute(
            "INSERT INTO issues (borrowernumber, itemnumber, branchcode, issuedate) "
            "VALUES (?, ?, ?, ?)", (borrowernumber, itemnumber, branchcode, issuedate))
        self._execute(
            "UPDATE items SET onloan = ?, holdingbranch = ? WHERE itemnumber = ?",
            (issuedate, branchcode, itemnumber))
        return cur.lastrowid

    def mark_issue_returned(self, issue_id, itemnumber, returndate, branchcode=None):
        self._execute(
            "UPDATE issues SET returndate = ? WHERE issue_id = ?", (returndate, issue_id))
        if branchcode is not None:
            self._execute(
                "UPDATE items SET onloan = NULL, holdingbranch = ? WHERE itemnumber = ?",
                (branchcode, itemnumber))
        else:
            self._execute(
                "UPDATE items SET onloan = NULL WHERE itemnumber = ?", (itemnumber,))

    # ---------------------------------------------------------------
    # Patron accounts
    # ---------------------------------------------------------------

    def add_account_credit(self, borrowernumber, amount, branchcode=None,
                           interface=None, description="Payment", timestamp=None):
        """Record a payment; credits are stored as negative amounts."""
        credit = -Decimal(amount)
        cur = self._execute(
            "INSERT INTO accountlines (borrowernumber, amount, description, "
            "branchcode, interface, timestamp) VALUES (?, ?, ?, ?, ?, ?)",
            (borrowernumber, str(credit), description, branchcode, interface,
             timestamp or _now()))
        return cur.lastrowid

    # ---------------------------------------------------------------
    # Pending offline operations
    # ---------------------------------------------------------------

    def add_offline_operation(self, userid, branchcode, timestamp, action,
                              barcode=None, cardnumber=None, amount=None):
        cur = self._execute(
            "INSERT INTO pending_offline_operations (userid, branchcode, timestamp, "
            "action, barcode, cardnumber, amount) VALUES (?, ?, ?, ?, ?, ?, ?)",
            (None if userid is None else str(userid), branchcode, timestamp,
             action, barcode, cardnumber, amount))
        return cur.lastrowid

    def get_offline_operations(self, branchcode=None):
        """Pending operations in storage order, optionally for one branch."""
        qb = QueryBuilder("pending_offline_operations").select(*_PENDING_COLUMNS)
        if branchcode is not None:
            qb.where("branchcode = ?", branchcode)
        sql, params = qb.order_by("operationid").build()
        return [PendingOperation.from_row(row)
                for row in self._execute(sql, params).fetchall()]

    def delete_offline_operation(self, operationid):
        cur = self._execute(
            "DELETE FROM pending_offline_operations WHERE operationid = ?",
            (operationid,))
        return cur.rowcount
