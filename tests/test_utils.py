"""Tests for the console helpers in zfscaffold.utils."""

from __future__ import annotations

from pathlib import Path

import pytest

from zfscaffold.utils import print_error, print_summary_table, print_warning, relative_to

pytestmark = pytest.mark.unit


class TestRelativeTo:
    def test_inside_root(self):
        assert relative_to(Path("/srv/app/module/Blog"), Path("/srv/app")) == "module/Blog"

    def test_outside_root(self):
        assert relative_to(Path("/tmp/x"), Path("/srv/app")) == "/tmp/x"


class TestPrinting:
    def test_markup_in_messages_is_not_interpreted(self, capsys):
        print_warning("route /blog[/:action]")
        assert "/blog[/:action]" in capsys.readouterr().out

    def test_error(self, capsys):
        print_error("The module Blog does not exist.")
        assert "The module Blog does not exist." in capsys.readouterr().out

    def test_summary_table(self, capsys):
        print_summary_table({"1": "Application"}, title="Modules installed")
        out = capsys.readouterr().out
        assert "Modules installed" in out
        assert "Application" in out
