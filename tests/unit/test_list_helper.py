from utils.list_helper import uniquify


def test_uniquify_keeps_first_occurrence_order():
    assert uniquify(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]


def test_uniquify_compares_nested_values_by_content():
    items = [{"id": 1}, [1, 2], {"id": 1}, [1, 2], {"id": 2}]
    assert uniquify(items) == [{"id": 1}, [1, 2], {"id": 2}]


def test_uniquify_does_not_merge_booleans_with_numbers():
    assert uniquify([1, True, 1, 0, False]) == [1, True, 0, False]


def test_uniquify_empty():
    assert uniquify([]) == []
