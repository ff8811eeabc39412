"""Tests for ContentStore physical storage operations."""

import io
from pathlib import Path

import pytest

from blobstore.content_store import ContentStore, generate_unique_filename
from common.exceptions import InvalidInputError, NotFoundError, SizeExceededError


@pytest.fixture
def small_chunk_store(tmp_path):
    return ContentStore(tmp_path / "store", chunk_size=16)


def partial_files(root: Path):
    return [p for p in root.rglob("*.part")]


class TestGenerateUniqueFilename:
    """Test storage key generation."""

    def test_keeps_extension(self):
        name = generate_unique_filename("photo.JPG")
        assert name.endswith(".JPG")
        assert len(name) == 36 + len(".JPG")

    def test_no_extension(self):
        assert len(generate_unique_filename("README")) == 36

    def test_names_differ(self):
        assert generate_unique_filename("a.txt") != generate_unique_filename("a.txt")


class TestResolve:
    """Test path resolution against the storage root."""

    def test_relative_path(self, content_store, config):
        resolved = content_store.resolve("2024/03/07")
        assert resolved == (config.storage_path / "2024/03/07").resolve()

    def test_escape_rejected(self, content_store):
        with pytest.raises(InvalidInputError):
            content_store.resolve("../outside")

    def test_absolute_outside_rejected(self, content_store, tmp_path):
        with pytest.raises(InvalidInputError):
            content_store.resolve(tmp_path.parent / "elsewhere")


class TestSave:
    """Test whole-payload saves."""

    @pytest.mark.asyncio
    async def test_save_writes_bytes(self, content_store):
        result = await content_store.save(b"hello world", "greeting.txt", "2024/03/07")

        stored = Path(result.full_path)
        assert stored.read_bytes() == b"hello world"
        assert stored.parent.name == "07"
        assert result.size_bytes == 11
        assert result.mime_type == "text/plain"
        assert result.unique_name == stored.name

    @pytest.mark.asyncio
    async def test_save_empty_rejected(self, content_store):
        with pytest.raises(InvalidInputError):
            await content_store.save(b"", "empty.txt", "x")

    @pytest.mark.asyncio
    async def test_save_leaves_no_partial(self, content_store, config):
        await content_store.save(b"data", "a.txt", "x")
        assert partial_files(config.storage_path) == []

    @pytest.mark.asyncio
    async def test_mime_sniffed_when_extension_unknown(self, content_store):
        result = await content_store.save(b"%PDF-1.7 body", "scan.unknownext", "x")
        assert result.mime_type == "application/pdf"


class TestSaveStreaming:
    """Test chunked ingestion."""

    @pytest.mark.asyncio
    async def test_equivalent_to_save(self, small_chunk_store):
        payload = bytes(range(256)) * 3

        whole = await small_chunk_store.save(payload, "blob.bin", "a")
        streamed = await small_chunk_store.save_streaming(
            io.BytesIO(payload), "blob.bin", "b", len(payload)
        )

        assert Path(streamed.full_path).read_bytes() == Path(whole.full_path).read_bytes()
        assert streamed.size_bytes == whole.size_bytes == len(payload)
        assert streamed.mime_type == whole.mime_type

    @pytest.mark.asyncio
    async def test_async_reader(self, small_chunk_store, async_reader_factory):
        payload = b"x" * 100
        result = await small_chunk_store.save_streaming(
            async_reader_factory(payload, max_piece=7), "notes.txt", "a", len(payload)
        )

        assert Path(result.full_path).read_bytes() == payload

    @pytest.mark.asyncio
    async def test_progress_is_monotonic(self, small_chunk_store):
        payload = b"y" * 100
        calls = []

        await small_chunk_store.save_streaming(
            io.BytesIO(payload),
            "notes.txt",
            "a",
            len(payload),
            on_progress=lambda written, expected: calls.append((written, expected)),
        )

        written = [w for w, _ in calls]
        assert written == sorted(written)
        assert len(set(written)) == len(written)
        assert written[-1] == len(payload)
        assert all(expected == len(payload) for _, expected in calls)
        assert len(calls) == 7

    @pytest.mark.asyncio
    async def test_size_mismatch_still_succeeds(self, small_chunk_store):
        result = await small_chunk_store.save_streaming(io.BytesIO(b"abc"), "a.txt", "a", 999)
        assert result.size_bytes == 3

    @pytest.mark.asyncio
    async def test_empty_stream_rejected(self, small_chunk_store, tmp_path):
        with pytest.raises(InvalidInputError):
            await small_chunk_store.save_streaming(io.BytesIO(b""), "a.txt", "a", 0)

        assert partial_files(tmp_path / "store") == []

    @pytest.mark.asyncio
    async def test_max_bytes_aborts_and_discards(self, small_chunk_store, tmp_path):
        with pytest.raises(SizeExceededError):
            await small_chunk_store.save_streaming(
                io.BytesIO(b"z" * 100), "a.txt", "a", 100, max_bytes=50
            )

        target = tmp_path / "store" / "a"
        assert [p for p in target.iterdir()] == []

    @pytest.mark.asyncio
    async def test_reader_failure_discards_partial(self, small_chunk_store, tmp_path):
        class FailingReader:
            def __init__(self):
                self.calls = 0

            def read(self, size):
                self.calls += 1
                if self.calls > 2:
                    raise RuntimeError("connection dropped")
                return b"q" * size

        with pytest.raises(RuntimeError):
            await small_chunk_store.save_streaming(FailingReader(), "a.txt", "a", 1000)

        assert list((tmp_path / "store" / "a").iterdir()) == []


class TestDeleteAndDirectories:
    """Test delete, directory and query operations."""

    @pytest.mark.asyncio
    async def test_delete(self, content_store):
        result = await content_store.save(b"data", "a.txt", "x")
        await content_store.delete(result.full_path)

        assert not Path(result.full_path).exists()
        with pytest.raises(NotFoundError):
            await content_store.delete(result.full_path)

    @pytest.mark.asyncio
    async def test_create_and_delete_directory(self, content_store):
        created = await content_store.create_directory("directories/docs/reports")
        assert created.is_dir()

        await content_store.delete_directory_recursive("directories/docs")
        assert not created.exists()

        with pytest.raises(NotFoundError):
            await content_store.delete_directory_recursive("directories/docs")

    @pytest.mark.asyncio
    async def test_cleanup_directory_tolerates_absence(self, content_store):
        await content_store.cleanup_directory("scratch")

        await content_store.create_directory("scratch/nested")
        await content_store.cleanup_directory("scratch")
        assert not await content_store.exists("scratch")

    @pytest.mark.asyncio
    async def test_exists_and_size(self, content_store):
        result = await content_store.save(b"12345", "a.txt", "x")

        assert await content_store.exists(result.full_path)
        assert await content_store.size(result.full_path) == 5
        with pytest.raises(NotFoundError):
            await content_store.size("x/missing.txt")

    @pytest.mark.asyncio
    async def test_move_and_copy(self, content_store):
        result = await content_store.save(b"payload", "a.txt", "x")

        await content_store.copy(result.full_path, "y/copy.txt")
        await content_store.move(result.full_path, "z/moved.txt")

        assert await content_store.read("y/copy.txt") == b"payload"
        assert await content_store.read("z/moved.txt") == b"payload"
        assert not await content_store.exists(result.full_path)

        with pytest.raises(NotFoundError):
            await content_store.move("x/missing.txt", "z/other.txt")

    @pytest.mark.asyncio
    async def test_read_missing(self, content_store):
        with pytest.raises(NotFoundError):
            await content_store.read("nope.txt")

    @pytest.mark.asyncio
    async def test_list_files(self, content_store):
        await content_store.create_directory("x/sub")
        first = await content_store.save(b"1", "a.txt", "x")
        second = await content_store.save(b"2", "b.txt", "x")

        listed = await content_store.list_files("x")
        assert listed == sorted([first.full_path, second.full_path])

        with pytest.raises(NotFoundError):
            await content_store.list_files("missing")
