# -*- coding: utf-8 -*-
"""
Apply pending offline operations to the circulation database.

This is the processing half of offline circulation: every queued
``issue``, ``return`` or ``payment`` becomes a real checkout, checkin
or account credit.  Each application returns a short report string
("Success." or the reason it could not be done) and the queue entry is
consumed either way; only an unrecognised action stays queued.
"""

from decimal import Decimal, InvalidOperation

REPORT_SUCCESS = "Success."
REPORT_BORROWER_NOT_FOUND = "Borrower not found."
REPORT_BARCODE_NOT_FOUND = "Barcode not found."
REPORT_ITEM_NOT_FOUND = "Item not found."
REPORT_ITEM_NOT_ISSUED = "Item not issued."
REPORT_INVALID_AMOUNT = "Invalid amount."
REPORT_UNKNOWN_ACTION = "Unknown action."

PAYMENT_INTERFACE = "koc"


class SqliteBranchRegistry(object):
    """Branch registry backed by the ``branches`` table."""

    def __init__(self, db):
        self._db = db

    def lookup(self, branchcode):
        return self._db.find_branch(branchcode) is not None


class PendingOperationStore(object):
    """Pending-operation queue backed by ``pending_offline_operations``."""

    def __init__(self, db):
        self._db = db

    def record(self, userid, branchcode, timestamp, action,
               barcode=None, cardnumber=None, amount=None):
        return self._db.add_offline_operation(
            userid, branchcode, timestamp, action, barcode, cardnumber, amount)

    def list_pending(self, branchcode=None):
        return self._db.get_offline_operations(branchcode)

    def delete(self, operationid):
        return self._db.delete_offline_operation(operationid)


class OfflineOperationProcessor(object):
    """Applies one PendingOperation at a time under a UserEnv."""

    def __init__(self, db):
        self._db = db
        self._handlers = {
            "issue": self._process_issue,
            "return": self._process_return,
            "payment": self._process_payment,
        }

    def apply(self, operation, user_env):
        handler = self._handlers.get(operation.action)
        if handler is None:
            return REPORT_UNKNOWN_ACTION

        with self._db.transaction():
            report = handler(operation, user_env)
            if operation.operationid is not None:
                self._db.delete_offline_operation(operation.operationid)
        return report

    def _process_issue(self, operation, user_env):
        borrower = self._db.find_borrower_by_cardnumber(operation.cardnumber)
        if borrower is None:
            return REPORT_BORROWER_NOT_FOUND
        borrowernumber = borrower[0]

        item = self._db.find_item_by_barcode(operation.barcode)
        if item is None:
            return REPORT_BARCODE_NOT_FOUND
        itemnumber = item[0]

        issue = self._db.get_open_issue(itemnumber)
        if issue is not None:
            if issue[1] == borrowernumber:
                # already out to this patron; the offline checkout is a renewal
                self._db.mark_issue_returned(issue[0], itemnumber, operation.timestamp)
            else:
                self._db.mark_issue_returned(
                    issue[0], itemnumber, operation.timestamp, user_env.branchcode)

        self._db.add_issue(borrowernumber, itemnumber, user_env.branchcode,
                           operation.timestamp)
        return REPORT_SUCCESS

    def _process_return(self, operation, user_env):
        item = self._db.find_item_by_barcode(operation.barcode)
        if item is None:
            return REPORT_ITEM_NOT_FOUND
        itemnumber = item[0]

        issue = self._db.get_open_issue(itemnumber)
        if issue is None:
            return REPORT_ITEM_NOT_ISSUED

        self._db.mark_issue_returned(
            issue[0], itemnumber, operation.timestamp, user_env.branchcode)
        return REPORT_SUCCESS

    def _process_payment(self, operation, user_env):
        borrower = self._db.find_borrower_by_cardnumber(operation.cardnumber)
        if borrower is None:
            return REPORT_BORROWER_NOT_FOUND

        amount = parse_amount(operation.amount)
        if amount is None:
            return REPORT_INVALID_AMOUNT

        self._db.add_account_credit(
            borrower[0], amount, branchcode=user_env.branchcode,
            interface=PAYMENT_INTERFACE, timestamp=operation.timestamp)
        return REPORT_SUCCESS


def parse_amount(raw):
    """Positive Decimal from a KOC amount field, or None."""
    if raw is None:
        return None
    try:
        amount = Decimal(str(raw).strip())
    except InvalidOperation:
        return None
    if not amount.is_finite() or amount <= 0:
        return None
    return amount
