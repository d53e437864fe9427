"""
Tests for the IDMapper class.
"""

import pytest

from socnetkit.common.id_mapper import IDMapper


class TestIDMapperBasic:
    """Test basic IDMapper functionality."""

    def setup_method(self):
        self.mapper = IDMapper()
        for name in (10, 20, 30):
            self.mapper.append(name)

    def test_empty_mapper(self):
        mapper = IDMapper()
        assert mapper.size() == 0
        assert mapper.is_empty()
        assert len(mapper) == 0

    def test_append_returns_positions(self):
        mapper = IDMapper()
        assert mapper.append(7) == 0
        assert mapper.append(3) == 1

    def test_lookup_both_directions(self):
        assert self.mapper.get_index(20) == 1
        assert self.mapper.get_name(2) == 30

    def test_absent_name_sentinel(self):
        assert self.mapper.get_index(99) == -1

    def test_duplicate_name_rejected(self):
        with pytest.raises(ValueError, match="already mapped"):
            self.mapper.append(10)

    def test_unhashable_name_rejected(self):
        with pytest.raises(TypeError, match="hashable"):
            self.mapper.append([1, 2])

    def test_get_name_errors(self):
        with pytest.raises(KeyError):
            self.mapper.get_name(5)
        with pytest.raises(TypeError):
            self.mapper.get_name("0")

    def test_remove_renumbers(self):
        self.mapper.remove(10)
        assert self.mapper.get_index(20) == 0
        assert self.mapper.get_index(30) == 1
        assert self.mapper.names() == [20, 30]

    def test_remove_absent(self):
        with pytest.raises(KeyError):
            self.mapper.remove(99)

    def test_batch_operations(self):
        assert self.mapper.get_index_batch([30, 10, 99]) == [2, 0, -1]
        assert self.mapper.get_name_batch([1, 0]) == [20, 10]

    def test_container_protocol(self):
        assert 20 in self.mapper
        assert 99 not in self.mapper
        assert list(self.mapper) == [10, 20, 30]

    def test_clear(self):
        self.mapper.clear()
        assert self.mapper.is_empty()
        assert self.mapper.get_index(10) == -1

    def test_string_representation(self):
        assert repr(self.mapper) == "IDMapper(size=3)"
        assert str(self.mapper) == "IDMapper(10->0, 20->1, 30->2)"
        assert str(IDMapper()) == "IDMapper(empty)"
