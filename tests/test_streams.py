"""
Tests for stream helpers and recursive listing.
"""

import io
import os
import pytest
from pathlib import Path

# Add parent directory to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.errors import (
    AccessDeniedError,
    InvalidArgumentError,
    IsDirectoryError,
    NotFoundError,
    OperationFailedError,
)
from modules.fileops import (
    close_quietly,
    closing_quietly,
    copy_input_stream_to_file,
    iter_files,
    list_files,
    open_input_stream,
    open_output_stream,
    suffix_filter,
)
from modules.fileops import streams


class ExplodingStream(io.BytesIO):
    """A stream whose close() fails."""

    def close(self):
        already_closed = self.closed
        super().close()
        if not already_closed:
            raise OSError("close failed")


class TestCloseQuietly:
    """Test close_quietly and closing_quietly."""

    def test_none_is_ignored(self):
        """Closing None does nothing."""
        close_quietly(None)

    def test_close_error_is_ignored(self):
        """An OSError from close() does not escape."""
        stream = ExplodingStream(b"data")

        close_quietly(stream)

        assert stream.closed

    def test_close_error_does_not_mask_primary_error(self):
        """The error raised inside the scope is the one that propagates."""
        stream = ExplodingStream(b"data")

        with pytest.raises(ValueError, match="primary"):
            with closing_quietly(stream):
                raise ValueError("primary")

        assert stream.closed


class TestOpenStreams:
    """Test open_output_stream and open_input_stream."""

    def test_output_creates_parents(self, tmp_path):
        """Missing parent directories are created."""
        target = tmp_path / "a" / "b" / "out.bin"

        with open_output_stream(target) as out:
            out.write(b"hello")

        assert target.read_bytes() == b"hello"

    def test_output_truncates(self, tmp_path):
        """Existing content is replaced."""
        target = tmp_path / "out.bin"
        target.write_bytes(b"previous content")

        with open_output_stream(target) as out:
            out.write(b"new")

        assert target.read_bytes() == b"new"

    def test_output_directory(self, tmp_path):
        """A directory cannot be opened for writing."""
        with pytest.raises(IsDirectoryError):
            open_output_stream(tmp_path)

    def test_output_unwritable(self, tmp_path, monkeypatch):
        """An unwritable file is rejected."""
        target = tmp_path / "out.bin"
        target.write_bytes(b"x")
        monkeypatch.setattr(os, "access", lambda path, mode: False)

        with pytest.raises(AccessDeniedError):
            open_output_stream(target)

    def test_output_parent_blocked(self, tmp_path):
        """A parent that cannot be created is an OperationFailedError."""
        blocker = tmp_path / "blocker"
        blocker.write_text("file")

        with pytest.raises(OperationFailedError):
            open_output_stream(blocker / "nested" / "out.bin")

    def test_input_reads(self, tmp_path):
        """An existing file opens for reading."""
        source = tmp_path / "in.bin"
        source.write_bytes(b"payload")

        with open_input_stream(source) as stream:
            assert stream.read() == b"payload"

    def test_input_missing(self, tmp_path):
        """A missing file raises NotFoundError."""
        with pytest.raises(NotFoundError):
            open_input_stream(tmp_path / "missing")

    def test_input_missing_is_file_not_found(self, tmp_path):
        """NotFoundError can be caught as FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            open_input_stream(tmp_path / "missing")

    def test_input_directory(self, tmp_path):
        """A directory cannot be opened for reading."""
        with pytest.raises(IsDirectoryError):
            open_input_stream(tmp_path)

    def test_input_unreadable(self, tmp_path, monkeypatch):
        """An unreadable file is rejected."""
        source = tmp_path / "in.bin"
        source.write_bytes(b"x")
        monkeypatch.setattr(os, "access", lambda path, mode: False)

        with pytest.raises(AccessDeniedError):
            open_input_stream(source)

    def test_empty_path(self):
        """Empty paths are invalid arguments."""
        with pytest.raises(InvalidArgumentError):
            open_input_stream("")
        with pytest.raises(InvalidArgumentError):
            open_output_stream(None)


class TestCopyInputStreamToFile:
    """Test copy_input_stream_to_file."""

    def test_copies_and_closes_source(self, tmp_path):
        """Bytes arrive in the file and the source ends up closed."""
        source = io.BytesIO(b"streamed bytes" * 1000)
        target = tmp_path / "nested" / "out.bin"

        copy_input_stream_to_file(source, target)

        assert target.read_bytes() == b"streamed bytes" * 1000
        assert source.closed

    def test_source_closed_on_failure(self, tmp_path):
        """The source is closed even when the destination is rejected."""
        source = io.BytesIO(b"data")

        with pytest.raises(IsDirectoryError):
            copy_input_stream_to_file(source, tmp_path)

        assert source.closed

    @pytest.mark.skipif(not os.path.exists("/dev/full"), reason="needs /dev/full")
    def test_buffered_write_failure_raised(self):
        """A write that only fails when the buffer is flushed still raises."""
        source = io.BytesIO(b"x" * 100)

        with pytest.raises(OSError):
            copy_input_stream_to_file(source, "/dev/full")

        assert source.closed

    def test_flush_failure_raised(self, tmp_path, monkeypatch):
        """An output whose closing flush fails makes the copy fail."""
        class FailingClose(io.BytesIO):
            def close(self):
                if not self.closed:
                    super().close()
                    raise OSError("no space left on device")

        output = FailingClose()
        monkeypatch.setattr(streams, "open_output_stream", lambda path: output)

        with pytest.raises(OSError, match="no space"):
            copy_input_stream_to_file(io.BytesIO(b"data"), tmp_path / "out.bin")

        assert output.closed

    def test_source_close_error_ignored(self, tmp_path):
        """A source that fails to close does not fail the copy."""
        source = ExplodingStream(b"data")
        target = tmp_path / "out.bin"

        copy_input_stream_to_file(source, target)

        assert target.read_bytes() == b"data"


class TestListFiles:
    """Test list_files, iter_files and suffix_filter."""

    @pytest.fixture
    def tree(self, tmp_path):
        """A tree with matching and non-matching files at several depths."""
        root = tmp_path / "tree"
        (root / "sub" / "deeper").mkdir(parents=True)
        (root / "logs.txt").mkdir()
        (root / "empty").mkdir()
        for rel in (
            "a.txt",
            "b.log",
            "txt",
            "notatxt",
            "sub/c.TXT",
            "sub/d.md",
            "sub/deeper/e.Txt",
            "sub/deeper/f.txt.bak",
            "logs.txt/g.txt",
        ):
            (root / rel).write_text(rel)
        return root

    def test_matches_suffix_at_any_depth(self, tree):
        """Exactly the .txt files are returned, any case, any depth."""
        found = {p.relative_to(tree).as_posix() for p in list_files(tree, "txt")}

        assert found == {"a.txt", "sub/c.TXT", "sub/deeper/e.Txt", "logs.txt/g.txt"}

    def test_directories_never_returned(self, tree):
        """Directories are traversed but never listed."""
        found = list_files(tree, "txt")

        assert all(p.is_file() for p in found)
        assert tree / "logs.txt" not in found

    def test_no_matches(self, tree):
        """An unused suffix yields an empty list."""
        assert list_files(tree, "csv") == []

    def test_not_a_directory(self, tree):
        """A file is not a valid root."""
        with pytest.raises(InvalidArgumentError):
            list_files(tree / "a.txt", "txt")

    def test_missing_directory(self, tmp_path):
        """A missing root is not a valid root either."""
        with pytest.raises(InvalidArgumentError):
            list_files(tmp_path / "missing", "txt")

    def test_iter_files_is_lazy(self, tree):
        """iter_files validates eagerly but yields lazily."""
        result = iter_files(tree, suffix_filter("txt"))

        assert not isinstance(result, list)
        assert next(result).name.lower().endswith(".txt")

    def test_predicate_prunes_directories(self, tree):
        """A directory the predicate rejects is not descended into."""
        def no_sub(path, is_dir):
            if is_dir:
                return path.name != "sub"
            return True

        found = {p.name for p in iter_files(tree, no_sub)}

        assert "c.TXT" not in found
        assert "e.Txt" not in found
        assert {"a.txt", "b.log", "g.txt"} <= found

    def test_suffix_filter(self):
        """The filter accepts directories and matching names."""
        accept = suffix_filter("txt")

        assert accept(Path("anything"), True)
        assert accept(Path("x.TXT"), False)
        assert accept(Path(".txt"), False)
        assert not accept(Path("txt"), False)
        assert not accept(Path("x.text"), False)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
