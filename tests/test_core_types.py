# -*- coding: utf-8 -*-
"""
Tests for core types: Timestamp, the CommandRecord variants and their
lookup tables, PendingOperation and UserEnv.
"""

import os
import sys
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), os.pardir))

from src.core.types import (
    Timestamp, CommandRecord, IssueCommand, ReturnCommand, PaymentCommand,
    PendingOperation, UserEnv, COMMAND_TYPES, ARGUMENT_SHAPES, get_command_class,
)


class TestTimestamp(unittest.TestCase):

    def test_str(self):
        self.assertEqual(str(Timestamp("2024-01-01", "10:00:00", "1")),
                         "2024-01-01 10:00:00 1")

    def test_sql_timestamp_drops_id(self):
        self.assertEqual(Timestamp("2024-01-01", "10:00:00", "1").sql_timestamp(),
                         "2024-01-01 10:00:00")

    def test_equality_and_hash(self):
        a = Timestamp("d", "t", "1")
        b = Timestamp("d", "t", "1")
        self.assertEqual(a, b)
        self.assertEqual(len({a, b}), 1)
        self.assertNotEqual(a, Timestamp("d", "t", "2"))


class TestCommandRecords(unittest.TestCase):

    def setUp(self):
        self.ts = Timestamp("2024-01-01", "10:00:00", "1")

    def test_lookup_tables(self):
        self.assertEqual(list(COMMAND_TYPES), ["issue", "return", "payment"])
        self.assertIs(get_command_class("payment"), PaymentCommand)
        self.assertIsNone(get_command_class("renew"))
        for command, cls in COMMAND_TYPES.items():
            self.assertEqual(ARGUMENT_SHAPES[command], cls.ARGUMENTS)

    def test_arguments_in_declaration_order(self):
        record = IssueCommand(self.ts, "CARD1", "BC1")
        self.assertEqual(list(record.arguments().items()),
                         [("cardnumber", "CARD1"), ("barcode", "BC1")])

    def test_get_missing_argument(self):
        record = ReturnCommand(self.ts, "BC1")
        self.assertEqual(record.get("barcode"), "BC1")
        self.assertIsNone(record.get("cardnumber"))
        self.assertIsNone(record.get("amount"))

    def test_from_arguments_ignores_extras(self):
        record = PaymentCommand.from_arguments(self.ts, ["CARD1", "2.00", "x"])
        self.assertEqual(record.amount, "2.00")

    def test_wrong_arity(self):
        with self.assertRaises(TypeError):
            CommandRecord.__init__(ReturnCommand.__new__(ReturnCommand), self.ts, "a", "b")

    def test_rejects_values_a_koc_line_cannot_carry(self):
        for bad in ("", "BC\t1", "BC1\n", None, 5):
            with self.assertRaises(ValueError):
                ReturnCommand(self.ts, bad)
        with self.assertRaises(ValueError):
            IssueCommand(self.ts, "", "BC1")

    def test_variants_are_distinct(self):
        # same values, different command
        self.assertNotEqual(IssueCommand(self.ts, "X", "Y"), PaymentCommand(self.ts, "X", "Y"))

    def test_repr(self):
        self.assertEqual(repr(ReturnCommand(self.ts, "BC1")),
                         "ReturnCommand(2024-01-01 10:00:00 1, barcode='BC1')")


class TestPendingOperation(unittest.TestCase):

    def test_from_row(self):
        op = PendingOperation.from_row(
            (5, "0", "CPL", "2024-01-01 10:00:00", "issue", "BC1", "CARD1", None))
        self.assertEqual(op.operationid, 5)
        self.assertEqual(op.branchcode, "CPL")
        self.assertEqual(op.as_dict()["cardnumber"], "CARD1")

    def test_equality(self):
        a = PendingOperation(1, "0", "CPL", "ts", "return", barcode="BC1")
        b = PendingOperation(1, "0", "CPL", "ts", "return", barcode="BC1")
        self.assertEqual(a, b)

    def test_user_env_defaults(self):
        env = UserEnv(0, "CPL")
        self.assertEqual(env.flags, 1)
        self.assertEqual(env.borrowernumber, 0)


if __name__ == "__main__":
    unittest.main()
