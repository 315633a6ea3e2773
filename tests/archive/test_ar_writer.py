"""Tests for ar member writing."""

import io

import pytest

from apt_repo_tool.archive import append_member, format_member_header


class TestFormatMemberHeader:
    """Tests for format_member_header function."""

    def test_header_layout(self):
        """Test the header is 60 bytes with fixed-width columns."""
        header = format_member_header("_gpgbuilder", 123, mtime=1700000000, uid=0, gid=0, mode=0o644)

        assert len(header) == 60
        assert header[0:16] == b"_gpgbuilder     "
        assert header[16:28] == b"1700000000  "
        assert header[28:34] == b"0     "
        assert header[34:40] == b"0     "
        assert header[40:48] == b"644     "
        assert header[48:58] == b"123       "
        assert header[58:60] == b"`\n"

    def test_name_too_long(self):
        """Test a name wider than its column is rejected."""
        with pytest.raises(ValueError):
            format_member_header("a-name-longer-than-16", 1, mtime=0)


class TestAppendMember:
    """Tests for append_member function."""

    def test_append_even_data(self):
        """Test appending data of even size adds no padding."""
        fh = io.BytesIO(b"!<arch>\n")

        append_member(fh, "x", b"ab", mtime=0)

        data = fh.getvalue()
        assert len(data) == 8 + 60 + 2
        assert data.endswith(b"`\nab")

    def test_append_odd_data_is_padded(self):
        """Test appending odd-sized data pads the member to an even length."""
        fh = io.BytesIO(b"!<arch>\n")

        append_member(fh, "x", b"abc", mtime=0)

        data = fh.getvalue()
        assert len(data) == 8 + 60 + 4
        assert data.endswith(b"abc\n")

    def test_append_aligns_member_start(self):
        """Test a member written after an odd-length container starts on an even offset."""
        fh = io.BytesIO(b"!<arch>\nX")

        append_member(fh, "x", b"ab", mtime=0)

        data = fh.getvalue()
        assert data[9:10] == b"\n"
        assert data[10:11] == b"x"
