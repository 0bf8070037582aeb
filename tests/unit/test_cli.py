"""
Unit tests for the build/serve command line entry point.
"""

from unittest.mock import patch

from zipsearch import cli, main
from zipsearch.bm25.codec import load_index


class TestSave:
    """Test `zipsearch --save`"""

    def test_save_builds_index(self, records_file, tmp_path):
        """Build input is indexed and written"""
        out = tmp_path / "index.msgpack"

        assert cli.main(["--save", str(records_file), str(out)]) == 0

        index = load_index(out)
        assert index.documents == ["md5_1", "md5_2", "md5_3"]

    def test_malformed_input_aborts(self, tmp_path):
        """Parse error: exit 1, nothing written"""
        records = tmp_path / "bad.jsonl"
        records.write_text("{oops}\n", encoding="utf-8")
        out = tmp_path / "index.msgpack"

        assert cli.main(["--save", str(records), str(out)]) == 1
        assert not out.exists()

    def test_invalid_utf8_input_aborts(self, tmp_path):
        """Non-UTF-8 build input: exit 1, nothing written"""
        records = tmp_path / "bad.jsonl"
        records.write_bytes(b'{"name": "\xff", "files": ["b"]}\n')
        out = tmp_path / "index.msgpack"

        assert cli.main(["--save", str(records), str(out)]) == 1
        assert not out.exists()

    def test_missing_input(self, tmp_path):
        """Missing input file: exit 1"""
        assert cli.main(["--save", str(tmp_path / "nope.jsonl"), str(tmp_path / "out")]) == 1

    def test_wrong_arguments(self):
        """Usage errors"""
        assert cli.main([]) == 2
        assert cli.main(["--save", "only-one"]) == 2


class TestServe:
    """Test `zipsearch <index>`"""

    def test_load_failure_aborts(self, tmp_path):
        """Unloadable index: exit 1 before the server starts"""
        bad = tmp_path / "bad.msgpack"
        bad.write_bytes(b"garbage")

        with patch("uvicorn.run") as mock_run:
            assert cli.main([str(bad)]) == 1
            mock_run.assert_not_called()

    def test_serve_installs_state(self, records_file, tmp_path):
        """Loaded index is installed before uvicorn starts"""
        out = tmp_path / "index.msgpack"
        cli.main(["--save", str(records_file), str(out)])

        try:
            with patch("uvicorn.run") as mock_run:
                assert cli.main([str(out)]) == 0
                mock_run.assert_called_once()
            assert main.serving_state is not None
            assert main.serving_state.index.documents == ["md5_1", "md5_2", "md5_3"]
            assert main.serving_state.source == str(out)
        finally:
            main.install_serving_state(None)
