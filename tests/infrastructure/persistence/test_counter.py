"""Tests for id allocators."""

import logging

from lazi.infrastructure.persistence import FileIdAllocator, InMemoryIdAllocator


class TestFileIdAllocator:
    def test_starts_at_one_and_increases(self, tmp_path):
        allocator = FileIdAllocator(tmp_path / "counter.txt")
        ids = [allocator.next_id() for _ in range(5)]
        assert ids == [1, 2, 3, 4, 5]
        assert (tmp_path / "counter.txt").read_text(encoding="utf-8") == "5"

    def test_continues_existing_counter(self, tmp_path):
        path = tmp_path / "counter.txt"
        path.write_text("41", encoding="utf-8")
        assert FileIdAllocator(path).next_id() == 42

    def test_creates_parent_directory(self, tmp_path):
        allocator = FileIdAllocator(tmp_path / "nested" / "counter.txt")
        assert allocator.next_id() == 1

    def test_corrupt_counter_falls_back_to_time(self, tmp_path, caplog):
        path = tmp_path / "counter.txt"
        path.write_text("not a number", encoding="utf-8")
        with caplog.at_level(logging.WARNING):
            value = FileIdAllocator(path).next_id()
        assert value > 1_000_000_000_000
        assert "unusable" in caplog.text

    def test_reset(self, tmp_path):
        allocator = FileIdAllocator(tmp_path / "counter.txt")
        allocator.next_id()
        allocator.reset()
        assert allocator.next_id() == 1


class TestInMemoryIdAllocator:
    def test_monotonic_and_reset(self):
        allocator = InMemoryIdAllocator(start=10)
        assert allocator.next_id() == 11
        assert allocator.next_id() == 12
        allocator.reset()
        assert allocator.next_id() == 1
