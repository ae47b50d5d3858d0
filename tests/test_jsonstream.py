from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

import pytest

from swisskit.errors import ElementDecodeError, FramingError, OpenError
from swisskit.jsonstream import iter_json_array


@dataclass
class Person:
    name: str = ""
    age: int = 0
    tags: list[str] = field(default_factory=list)


def test_iter_json_array_decodes_elements_in_order(write_json) -> None:
    data = [{"name": "a", "age": 1}, {"name": "b", "age": 2}, {"name": "c", "age": 3}]
    path = write_json(data)

    people = list(iter_json_array(path, Person))

    assert people == [Person("a", 1), Person("b", 2), Person("c", 3)]


def test_iter_json_array_small_buffer_and_whitespace(write_json) -> None:
    data = [{"name": f"p{i}", "age": i, "tags": ["x", "y"]} for i in range(50)]
    path = write_json(" \n\t" + json.dumps(data, indent=4) + "\n")

    people = list(iter_json_array(path, Person, buf_size=7))

    assert [p.name for p in people] == [f"p{i}" for i in range(50)]
    assert people[10].tags == ["x", "y"]


def test_iter_json_array_empty_array(write_json) -> None:
    path = write_json("[]")
    assert list(iter_json_array(path, Person)) == []


def test_iter_json_array_ignores_unknown_fields_and_fills_defaults(write_json) -> None:
    path = write_json([{"name": "a", "unknown": True}, {"age": 7}])

    people = list(iter_json_array(path, Person))

    assert people == [Person(name="a"), Person(age=7)]


def test_iter_json_array_returns_independent_instances(write_json) -> None:
    path = write_json([{"name": "a"}, {"name": "b"}])

    first, second = iter_json_array(path, Person)
    first.tags.append("mutated")

    assert first is not second
    assert second.tags == []


def test_iter_json_array_plain_json_shape(write_json) -> None:
    path = write_json([1, 2.5, "x", None, {"k": [1, 2]}])

    assert list(iter_json_array(path, Any)) == [1, 2.5, "x", None, {"k": [1, 2]}]


def test_iter_json_array_rejects_object_at_top_level(write_json) -> None:
    path = write_json('{"name": "a"}')

    with pytest.raises(FramingError, match="opening") as exc:
        list(iter_json_array(path, Person))
    assert exc.value.where == "opening"


def test_iter_json_array_rejects_empty_file(write_json) -> None:
    path = write_json("")

    with pytest.raises(FramingError) as exc:
        list(iter_json_array(path, Person))
    assert exc.value.where == "opening"


def test_iter_json_array_missing_file(tmp_path) -> None:
    with pytest.raises(OpenError) as exc:
        list(iter_json_array(tmp_path / "nope.json", Person))
    assert isinstance(exc.value.__cause__, FileNotFoundError)


def test_iter_json_array_stops_at_malformed_element(write_json) -> None:
    path = write_json('[{"name": "a"}, {"name": "b"}, {"name": }, {"name": "d"}]')

    got: list[Person] = []
    with pytest.raises(ElementDecodeError) as exc:
        for p in iter_json_array(path, Person):
            got.append(p)

    assert [p.name for p in got] == ["a", "b"]
    assert exc.value.index == 3
    assert "element 3" in str(exc.value)


def test_iter_json_array_reports_shape_mismatch_with_index(write_json) -> None:
    path = write_json([{"age": 1}, {"age": "not a number"}, {"age": 3}])

    got: list[Person] = []
    with pytest.raises(ElementDecodeError) as exc:
        for p in iter_json_array(path, Person):
            got.append(p)

    assert [p.age for p in got] == [1]
    assert exc.value.index == 2


def test_iter_json_array_missing_separator_is_element_error(write_json) -> None:
    path = write_json('[{"name": "a"} {"name": "b"}]')

    got: list[Person] = []
    with pytest.raises(ElementDecodeError) as exc:
        for p in iter_json_array(path, Person):
            got.append(p)

    assert len(got) == 1
    assert exc.value.index == 2


def test_iter_json_array_unterminated_array_is_closing_error(write_json) -> None:
    path = write_json('[{"name": "a"}, {"name": "b"}')

    got: list[Person] = []
    with pytest.raises(FramingError) as exc:
        for p in iter_json_array(path, Person):
            got.append(p)

    assert len(got) == 2
    assert exc.value.where == "closing"


def test_iter_json_array_close_early_releases_file(write_json, monkeypatch) -> None:
    path = write_json([{"name": "a"}, {"name": "b"}])
    opened = []

    import builtins

    real_open = builtins.open

    def tracking_open(*args, **kwargs):
        f = real_open(*args, **kwargs)
        if args and args[0] == path:
            opened.append(f)
        return f

    monkeypatch.setattr(builtins, "open", tracking_open)

    it = iter_json_array(path, Person)
    assert next(it).name == "a"
    it.close()

    assert opened and all(f.closed for f in opened)


@pytest.mark.parametrize("bad", ['"5"', "true", "2.0"])
def test_iter_json_array_does_not_coerce_mismatched_values(write_json, bad) -> None:
    path = write_json(f'[{{"age": 1}}, {{"age": {bad}}}, {{"age": 3}}]')

    got: list[Person] = []
    with pytest.raises(ElementDecodeError) as exc:
        for p in iter_json_array(path, Person):
            got.append(p)

    assert [p.age for p in got] == [1]
    assert exc.value.index == 2


def test_iter_json_array_int_fills_float_field(write_json) -> None:
    @dataclass
    class Versioned:
        version: float = 0.0

    path = write_json([{"version": 6}, {"version": 1.5}])

    assert list(iter_json_array(path, Versioned)) == [Versioned(6.0), Versioned(1.5)]


def test_iter_json_array_null_element_takes_defaults(write_json) -> None:
    path = write_json('[null, {"name": "b"}]')

    assert list(iter_json_array(path, Person)) == [Person(), Person(name="b")]
