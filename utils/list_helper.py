from typing import Any, List


def uniquify(items: List[Any]) -> List[Any]:
    """Return items without duplicates, keeping the first occurrence of each."""
    seen_hashable = set()
    seen_unhashable: List[Any] = []
    result = []

    for item in items:
        try:
            marker = (type(item) is bool, item)
            if marker in seen_hashable:
                continue
            seen_hashable.add(marker)
        except TypeError:
            # Lists and dicts decoded from JSON are compared by value
            if item in seen_unhashable:
                continue
            seen_unhashable.append(item)
        result.append(item)

    return result
