# -*- coding: utf-8 -*-
"""
Tests for the command-line programs in src/cli/.

Exit codes, usage output, and a full export -> import -> process run.
"""

import os

import pytest

from src.cli import bulk_import, export_log
from src.storage.database import DatabaseManager
from tests.conftest import seed_library, write_koc

HEADER = "Version=1.0\tGenerator=export_offline_circ_log.py\tGeneratorVersion=1.0"


@pytest.fixture
def db_path(tmp_path):
    path = str(tmp_path / "circ.db")
    with DatabaseManager(path) as db:
        seed_library(db)
    return path


# ---------------------------------------------------------------------------
# export_offline_circ_log
# ---------------------------------------------------------------------------

class TestExportCli:

    def test_no_arguments(self, capsys):
        assert export_log.main([]) == 1
        assert "--file" in capsys.readouterr().out

    def test_help(self, capsys):
        assert export_log.main(["--help", "--file", "x.log"]) == 1
        assert "export_offline_circ_log.py" in capsys.readouterr().out

    def test_unknown_option(self):
        assert export_log.main(["--bogus"]) == 1

    def test_missing_file(self, tmp_path, capsys):
        assert export_log.main(["-f", str(tmp_path / "nope.log"), "-o", str(tmp_path)]) == 2
        assert "File not found!" in capsys.readouterr().out

    def test_input_not_utf8(self, tmp_path, capsys):
        log = tmp_path / "offlinecirc.log"
        log.write_bytes(b"2024-01-01 10:00:00 1\tissue\tC\xff\tBC1\tCPL\n")
        out = tmp_path / "out"

        assert export_log.main(["--file", str(log), "--output_dir", str(out)]) == 2
        printed = capsys.readouterr().out
        assert "EXPORT ERROR: %s: not utf-8 text" % log in printed
        assert not (out / "CPL.koc").exists()

    def test_export(self, tmp_path, capsys):
        log = tmp_path / "offlinecirc.log"
        log.write_text("2024-01-01\t10:00:00\t1\tissue\t1234\t5678\tCPL\n", encoding="utf-8")
        out = tmp_path / "out"

        assert export_log.main(["--file", str(log), "--output_dir", str(out)]) == 0
        assert (out / "CPL.koc").read_text(encoding="utf-8") == (
            HEADER + "\n2024-01-01\t10:00:00\t1\tissue\t1234\t5678\n")
        assert "Wrote 1 line(s) to 1 branch file(s)" in capsys.readouterr().out

    def test_output_dir_from_config(self, tmp_path, monkeypatch):
        out = tmp_path / "from_config"
        ini = tmp_path / "offline_circ.ini"
        ini.write_text(
            "[export]\noutput_dir = ${KOC_TEST_OUT}\ngenerator = tests\n"
            "generator_version = 2.0\n")
        monkeypatch.setenv("KOC_TEST_OUT", str(out))
        log = tmp_path / "offlinecirc.log"
        log.write_text("a b c\treturn\tBC1\tMPL\n", encoding="utf-8")

        assert export_log.main(["-f", str(log), "-c", str(ini)]) == 0
        first = (out / "MPL.koc").read_text(encoding="utf-8").splitlines()[0]
        assert first == "Version=1.0\tGenerator=tests\tGeneratorVersion=2.0"


# ---------------------------------------------------------------------------
# bulk_import_koc
# ---------------------------------------------------------------------------

class TestBulkImportCli:

    def test_no_mode_prints_usage(self, capsys):
        assert bulk_import.main([]) == 1
        assert "bulk_import_koc.py -d /path/to/dirs" in capsys.readouterr().out

    def test_verbose_alone_is_not_a_mode(self):
        assert bulk_import.main(["-v"]) == 1

    def test_help(self):
        assert bulk_import.main(["--help"]) == 1

    def test_import_needs_dir(self, capsys):
        assert bulk_import.main(["--import"]) == 1
        assert "--import needs --dir" in capsys.readouterr().out

    def test_import_missing_dir(self, tmp_path):
        assert bulk_import.main(["-i", "-d", str(tmp_path / "nope")]) == 2

    def test_import_and_process(self, tmp_path, db_path, capsys):
        root = tmp_path / "koc"
        write_koc(root / "CPL", "a.koc", [
            "2024-01-01 10:00:00 1\tissue\tCARD1\tBC1",
            "2024-01-01 10:01:00 2\tpayment\tCARD1\t1.00",
        ])
        write_koc(root / "BOGUS", "a.koc", ["2024-01-01 10:00:00 1\treturn\tBC1"])

        rc = bulk_import.main(["--import", "--process", "-d", str(root),
                               "--database", db_path])
        assert rc == 0
        out = capsys.readouterr().out
        assert "Imported 2 record(s) from 1 file(s) in 1 branch(es)" in out
        assert "Processed 2 of 2 pending operation(s)" in out

        with DatabaseManager(db_path) as db:
            assert db.get_offline_operations() == []
            item = db.find_item_by_barcode("BC1")
            assert db.get_open_issue(item[0]) is not None

    def test_import_only_leaves_queue(self, tmp_path, db_path):
        root = tmp_path / "koc"
        write_koc(root / "MPL", "a.koc", ["2024-01-01 10:00:00 1\treturn\tBC3"])
        assert bulk_import.main(["-i", "-d", str(root), "--database", db_path]) == 0
        with DatabaseManager(db_path) as db:
            assert [op.action for op in db.get_offline_operations()] == ["return"]

    def test_confirm_is_a_dry_run(self, tmp_path, db_path, capsys):
        root = tmp_path / "koc"
        write_koc(root / "CPL", "a.koc", ["2024-01-01 10:00:00 1\treturn\tBC1"])
        rc = bulk_import.main(["-i", "-p", "-c", "-d", str(root), "--database", db_path])
        assert rc == 0
        assert "[dry run]" in capsys.readouterr().out
        with DatabaseManager(db_path) as db:
            assert db.get_offline_operations() == []

    def test_confirm_leaves_existing_queue_alone(self, tmp_path, db_path):
        with DatabaseManager(db_path) as db:
            db.add_offline_operation(0, "CPL", "2024-01-01 09:00:00", "return", "BC2")
        root = tmp_path / "koc"
        write_koc(root / "CPL", "a.koc", ["2024-01-01 10:00:00 1\treturn\tBC1"])

        assert bulk_import.main(["-i", "-p", "-c", "-d", str(root), "--database", db_path]) == 0
        with DatabaseManager(db_path) as db:
            assert [op.barcode for op in db.get_offline_operations()] == ["BC2"]

    def test_database_from_config(self, tmp_path, db_path):
        ini = tmp_path / "offline_circ.ini"
        ini.write_text("[database]\npath = %s\n[import]\nuserid = 5\n" % db_path)
        root = tmp_path / "koc"
        write_koc(root / "CPL", "a.koc", ["2024-01-01 10:00:00 1\treturn\tBC1"])

        assert bulk_import.main(["-i", "-d", str(root), "--config", str(ini)]) == 0
        with DatabaseManager(db_path) as db:
            assert [op.userid for op in db.get_offline_operations()] == ["5"]

    def test_database_error(self, tmp_path, capsys):
        bad = os.path.join(str(tmp_path), "no", "such", "dir", "x.db")
        assert bulk_import.main(["-p", "--database", bad]) == 2
        assert "DATABASE ERROR" in capsys.readouterr().out


# ---------------------------------------------------------------------------
# export then import
# ---------------------------------------------------------------------------

def test_exported_files_import_cleanly(tmp_path, db_path):
    log = tmp_path / "offlinecirc.log"
    log.write_text(
        "2024-01-01 10:00:00 1\tissue\tCARD1\tBC1\tCPL\n"
        "2024-01-01 10:00:01 2\tissue\tCARD2\tBC3\tMPL\n"
        "2024-01-01 10:00:02 3\treturn\tBC1\tCPL\n",
        encoding="utf-8")
    root = tmp_path / "koc"
    for branchcode in ("CPL", "MPL"):
        (root / branchcode).mkdir(parents=True)

    # the exporter writes flat; the importer wants <root>/<branchcode>/
    staging = tmp_path / "staging"
    assert export_log.main(["-f", str(log), "-o", str(staging)]) == 0
    for branchcode in ("CPL", "MPL"):
        os.rename(str(staging / (branchcode + ".koc")),
                  str(root / branchcode / (branchcode + ".koc")))

    assert bulk_import.main(["-i", "-p", "-d", str(root), "--database", db_path]) == 0
    with DatabaseManager(db_path) as db:
        assert db.get_open_issue(db.find_item_by_barcode("BC1")[0]) is None
        assert db.get_open_issue(db.find_item_by_barcode("BC3")[0]) is not None
