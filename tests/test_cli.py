"""Tests for the CLI module."""

from __future__ import annotations

from pathlib import Path

import pytest

from richtext2html.cli import main

FIXTURE_DIR = Path(__file__).parent / "fixtures"
SAMPLE_JSON = FIXTURE_DIR / "document.json"
SAMPLE_MD = FIXTURE_DIR / "sample.md"
RECIPIENT = ["--payment-recipient", "shop@example.com"]


class TestCLIMain:
    """Test the main() entry point."""

    def test_list_styles(self, capsys):
        ret = main(["--list-styles"])
        assert ret == 0
        out = capsys.readouterr().out
        assert "smart" in out
        assert "card" in out

    def test_missing_input(self):
        with pytest.raises(SystemExit):
            main([])

    def test_file_not_found(self, capsys):
        ret = main(["nonexistent.json", *RECIPIENT])
        assert ret == 1
        err = capsys.readouterr().err
        assert "not found" in err

    def test_convert_sample(self, tmp_path, capsys):
        out = tmp_path / "output.html"
        ret = main([str(SAMPLE_JSON), "-o", str(out), *RECIPIENT])
        assert ret == 0
        assert out.read_text(encoding="utf-8").startswith("<h3>Spring Exhibition</h3>")
        assert f"Converted: {out}" in capsys.readouterr().out

    def test_markdown_input(self, tmp_path):
        out = tmp_path / "output.html"
        ret = main([str(SAMPLE_MD), "-o", str(out), "--markdown", *RECIPIENT])
        assert ret == 0
        assert "<strong>March 3</strong>" in out.read_text(encoding="utf-8")

    def test_verbose_flag(self, tmp_path, capsys):
        out = tmp_path / "output.html"
        ret = main([str(SAMPLE_JSON), "-o", str(out), "-v", *RECIPIENT])
        assert ret == 0
        captured = capsys.readouterr()
        assert "Converted:" not in captured.out
        assert "Done." in captured.err

    def test_default_output_name(self, tmp_path):
        doc = tmp_path / "myfile.json"
        doc.write_text('{"nodeType": "document", "content": []}', encoding="utf-8")
        ret = main([str(doc), *RECIPIENT])
        assert ret == 0
        assert (tmp_path / "myfile.html").exists()

    def test_invalid_json_reports_error(self, tmp_path, capsys):
        doc = tmp_path / "broken.json"
        doc.write_text("{oops", encoding="utf-8")
        ret = main([str(doc), *RECIPIENT])
        assert ret == 1
        assert "Error:" in capsys.readouterr().err

    def test_style_presets(self, tmp_path):
        for preset in ["smart", "simple", "card"]:
            out = tmp_path / f"output_{preset}.html"
            ret = main([str(SAMPLE_JSON), "-o", str(out), "-s", preset, *RECIPIENT])
            assert ret == 0, f"Failed for preset: {preset}"
            assert out.exists()
