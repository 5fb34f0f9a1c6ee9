"""
续行合并测试
"""
from excel_data_parser import ParserConfig, SheetSchema, value_from_python
from excel_data_parser.merger import ListMerger


def _merger(path_to_default=None, **config_kwargs):
    schema = SheetSchema(sheet_name="Sheet1", path_to_default=path_to_default or {})
    return ListMerger(schema, ParserConfig(**config_kwargs))


def test_continuation_row_appends_to_list():
    previous = value_from_python({"Name": "Hero", "Items": [{"Name": "Sword"}]})
    candidate = value_from_python({"Name": None, "Items": [{"Name": "Shield"}]})

    assert _merger().try_merge(previous, candidate)
    assert previous.to_python() == {"Name": "Hero", "Items": [{"Name": "Sword"}, {"Name": "Shield"}]}


def test_non_null_sibling_starts_new_record():
    previous = value_from_python({"Name": "Hero", "Items": [{"Name": "Sword"}]})
    candidate = value_from_python({"Name": "Villain", "Items": [{"Name": "Axe"}]})

    assert not _merger().try_merge(previous, candidate)
    assert previous.to_python() == {"Name": "Hero", "Items": [{"Name": "Sword"}]}


def test_no_list_fields_means_no_merge():
    previous = value_from_python({"Name": "Hero"})
    candidate = value_from_python({"Name": None, "Level": "3"})
    assert not _merger().try_merge(previous, candidate)


def test_empty_sides_never_merge():
    merger = _merger()
    assert not merger.try_merge(value_from_python({}), value_from_python({"Items": ["a"]}))
    assert not merger.try_merge(value_from_python({"Items": ["a"]}), value_from_python({}))


def test_nested_lists_merge_recursively():
    previous = value_from_python({
        "Name": "Hero",
        "Items": [{"Name": "Sword", "Tags": ["sharp"]}],
    })
    candidate = value_from_python({"Name": None, "Items": [{"Name": None, "Tags": ["shiny"]}]})

    assert _merger().try_merge(previous, candidate)
    assert previous.to_python()["Items"] == [{"Name": "Sword", "Tags": ["sharp", "shiny"]}]


def test_failed_inner_merge_appends_with_defaults():
    previous = value_from_python({"Items": [{"Name": "Sword", "Count": "3"}]})
    candidate = value_from_python({"Items": [{"Name": "Shield", "Count": None}]})

    merger = _merger({"Items.Count": "1"})
    assert merger.try_merge(previous, candidate)
    assert previous.to_python()["Items"] == [
        {"Name": "Sword", "Count": "3"},
        {"Name": "Shield", "Count": "1"},
    ]


def test_appended_item_comes_from_filled_row():
    previous = value_from_python({"Items": [{"Name": "Sword", "Stats": {"Hp": "3"}}]})
    candidate = value_from_python({"Items": [{"Name": "Shield", "Stats": None}]})
    filled = value_from_python({"Items": [{"Name": "Shield", "Stats": {"Hp": "0"}}]})

    assert _merger({"Items.Stats.Hp": "0"}).try_merge(previous, candidate, filled=filled)
    assert previous.to_python()["Items"] == [
        {"Name": "Sword", "Stats": {"Hp": "3"}},
        {"Name": "Shield", "Stats": {"Hp": "0"}},
    ]


def test_scalar_lists_only_append():
    previous = value_from_python({"Tags": ["a"]})
    candidate = value_from_python({"Tags": ["b"]})

    assert _merger().try_merge(previous, candidate)
    assert previous.to_python() == {"Tags": ["a", "b"]}


def test_null_target_is_seeded_as_list():
    previous = value_from_python({"Name": "Hero", "Items": None})
    candidate = value_from_python({"Name": None, "Items": [{"Name": "Sword", "Count": None}]})

    assert _merger({"Items.Count": "1"}).try_merge(previous, candidate)
    assert previous.to_python()["Items"] == [{"Name": "Sword", "Count": "1"}]


def test_empty_new_list_is_skipped():
    previous = value_from_python({"Items": ["a"]})
    candidate = value_from_python({"Items": []})

    assert not _merger().try_merge(previous, candidate)
    assert previous.to_python() == {"Items": ["a"]}


def test_non_list_target_is_not_processed():
    previous = value_from_python({"Items": "oops"})
    candidate = value_from_python({"Items": ["a"]})

    assert not _merger().try_merge(previous, candidate)
    assert previous.to_python() == {"Items": "oops"}


def test_multiple_targets_merge_together():
    previous = value_from_python({"Name": "Hero", "Items": ["Sword"], "Skills": ["Slash"]})
    candidate = value_from_python({"Name": None, "Items": ["Shield"], "Skills": []})

    assert _merger().try_merge(previous, candidate)
    assert previous.to_python() == {"Name": "Hero", "Items": ["Sword", "Shield"], "Skills": ["Slash"]}


def test_depth_guard_stops_recursion():
    merger = _merger(max_nesting_level=1)
    previous = value_from_python({"Items": ["a"]})
    candidate = value_from_python({"Items": ["b"]})

    assert not merger.try_merge(previous, candidate, parent_path="a.b")
    assert merger.logger.warning_counts == {"NestingTooDeep": 1}
    assert previous.to_python() == {"Items": ["a"]}


def test_depth_guard_falls_back_to_append():
    # 第二层超过限制：内层不再合并，新元素直接追加
    merger = _merger(max_nesting_level=1)
    previous = value_from_python({"A": [{"B": [{"C": ["x"]}]}]})
    candidate = value_from_python({"A": [{"B": [{"C": ["y"]}]}]})

    assert merger.try_merge(previous, candidate)
    assert previous.to_python() == {"A": [{"B": [{"C": ["x"]}, {"C": ["y"]}]}]}
    assert merger.logger.warning_counts == {"NestingTooDeep": 1}
