"""Tests for splitting input lines into pipeline stages."""

from pipeshell.parser import parse_command


class TestParseCommand:
    """Test pipe splitting and whitespace tokenizing."""

    def test_single_command(self):
        assert parse_command("ls -la /tmp") == [["ls", "-la", "/tmp"]]

    def test_pipeline_keeps_stage_order(self):
        assert parse_command("cat file | sort -r | head -n 3") == [
            ["cat", "file"],
            ["sort", "-r"],
            ["head", "-n", "3"],
        ]

    def test_blank_line_is_empty(self):
        assert parse_command("") == []
        assert parse_command("   \t ") == []

    def test_empty_segments_dropped(self):
        """Leading, trailing and doubled pipes do not create stages."""
        assert parse_command("| ls || wc -l |") == [["ls"], ["wc", "-l"]]
        assert parse_command(" | | ") == []

    def test_no_quoting(self):
        """Quotes are ordinary characters."""
        assert parse_command('echo "a b"') == [["echo", '"a', 'b"']]

    def test_pipe_without_spaces(self):
        assert parse_command("ps|grep\tpython") == [["ps"], ["grep", "python"]]
