"""
表头解析测试
"""
from excel_data_parser import ParserConfig
from excel_data_parser.logger import DualLogger
from excel_data_parser.schema_extractor import SchemaExtractor


def _extract(grid, config=None):
    config = config or ParserConfig()
    logger = DualLogger(log_level=config.log_level)
    return SchemaExtractor(config, logger).extract(grid), logger


def test_every_path_level_gets_a_type(make_grid):
    grid = make_grid([
        ["#var", "Stats"],
        ["#var", "Attack"],
        ["#var", "Min"],
        ["#type", "object"],
        ["#type", "object"],
        ["#type", "int"],
        [None, "3"],
    ])
    schema, _ = _extract(grid)

    assert schema.header_row_count == 6
    assert schema.first_data_row == 7
    assert schema.path_to_type == {
        "Stats": "object",
        "Stats.Attack": "object",
        "Stats.Attack.Min": "int",
    }


def test_default_registered_for_full_path_only(make_grid):
    grid = make_grid([
        ["#var", "Stats", "Name"],
        ["#var", "Hp", None],
        ["#type", "object", "string"],
        ["#type", "int", None],
        ["#default", "1", None],
        ["#default", "100", None],
    ])
    schema, _ = _extract(grid)

    assert schema.path_to_default == {"Stats.Hp": "100"}
    assert schema.columns[2].default_value == "100"


def test_unrecognized_marker_becomes_metadata(make_grid):
    grid = make_grid([
        ["#description", None, "Player stats"],
        ["#var", "Name", "Level"],
        ["#type", "string", "int"],
    ])
    schema, _ = _extract(grid)

    assert schema.metadata == {"description": "Player stats"}
    assert "description" not in schema.path_to_type


def test_metadata_scan_reaches_last_column(make_grid):
    grid = make_grid([
        ["#note", None, None, "tail"],
        ["#var", "A", "B", "C"],
        ["#type", "int", "int", "int"],
    ])
    schema, _ = _extract(grid)
    assert schema.metadata["note"] == "tail"


def test_keywords_match_case_insensitively_by_default(make_grid):
    grid = make_grid([
        ["#VAR", "Name"],
        ["#Type", "STRING"],
    ])
    schema, _ = _extract(grid)
    assert schema.path_to_type == {"Name": "STRING"}


def test_case_sensitive_keywords_become_metadata(make_grid):
    grid = make_grid([
        ["#VAR", "Name"],
        ["#var", "Name"],
        ["#type", "string"],
    ])
    schema, _ = _extract(grid, ParserConfig(case_sensitive=True))
    assert schema.metadata == {"VAR": "Name"}
    assert schema.path_to_type == {"Name": "string"}


def test_custom_keyword_is_collected_per_column(make_grid):
    grid = make_grid([
        ["#var", "Name", "Level"],
        ["#type", "string", "int"],
        ["#desc", "Hero name", "Hero level"],
    ])
    schema, _ = _extract(grid, ParserConfig(custom_keywords=["desc"]))

    assert schema.metadata == {}
    assert schema.columns[3].get("desc") == ["Hero level"]


def test_header_block_stops_at_first_non_header_row(make_grid):
    grid = make_grid([
        ["#var", "Name"],
        ["#type", "string"],
        [None, "Alice"],
        ["#note", "late"],
    ])
    schema, _ = _extract(grid)

    assert schema.header_row_count == 2
    assert schema.metadata == {}


def test_no_schema_without_header_rows(make_grid):
    schema, _ = _extract(make_grid([["Name"], ["Alice"]]))
    assert schema is None


def test_no_schema_without_type_row(make_grid):
    schema, _ = _extract(make_grid([["#var", "Name"], [None, "Alice"]]))
    assert schema is None


def test_mismatched_var_type_counts_drop_column(make_grid):
    grid = make_grid([
        ["#var", "Name", "Stats"],
        ["#var", None, "Hp"],
        ["#type", "string", "int"],
    ])
    schema, logger = _extract(grid)

    assert list(schema.columns) == [2]
    assert schema.dropped_columns == [3]
    assert "Stats" not in schema.path_to_type
    assert logger.warning_counts == {"ColumnDropped": 1}


def test_strict_mode_drops_invalid_identifier_and_type(make_grid):
    grid = make_grid([
        ["#var", "Name", "1st", "Level"],
        ["#type", "string", "int", "decimal"],
    ])
    schema, logger = _extract(grid)

    assert list(schema.columns) == [2]
    assert logger.warning_counts == {"InvalidIdentifier": 1, "InvalidType": 1}


def test_lenient_mode_keeps_unusual_names(make_grid):
    grid = make_grid([
        ["#var", "1st"],
        ["#type", "decimal"],
    ])
    schema, _ = _extract(grid, ParserConfig(strict_validation=False))
    assert schema.path_to_type == {"1st": "decimal"}


def test_columns_without_header_values_are_ignored(make_grid):
    grid = make_grid([
        ["#var", "Name", None, "Level"],
        ["#type", "string", None, "int"],
        [None, "Alice", "stray", "3"],
    ])
    schema, logger = _extract(grid)

    assert list(schema.columns) == [2, 4]
    assert schema.dropped_columns == []
    assert logger.warning_counts == {}


def test_merged_header_cells_resolve_to_anchor(make_grid):
    # Items 横跨 B1:C1
    grid = make_grid(
        [
            ["#var", "Items", None],
            ["#var", "Name", "Count"],
            ["#type", "list", "list"],
            ["#type", "string", "int"],
        ],
        merged_cells=[{"min_row": 0, "max_row": 0, "min_col": 1, "max_col": 2}],
    )
    schema, _ = _extract(grid)

    assert schema.columns[3].var_names == ["Items", "Count"]
    assert schema.path_to_type["Items.Count"] == "int"


def test_row_limit_truncates_with_warning(make_grid):
    rows = [["#var", "Name"], ["#type", "string"]] + [[None, f"n{i}"] for i in range(5)]
    schema, logger = _extract(make_grid(rows), ParserConfig(max_rows=4))

    assert schema.row_count == 4
    assert logger.warning_counts == {"RowsTruncated": 1}


def test_column_limit_truncates_with_warning(make_grid):
    grid = make_grid([
        ["#var", "A", "B", "C"],
        ["#type", "int", "int", "int"],
    ])
    schema, logger = _extract(grid, ParserConfig(max_cols=3))

    assert list(schema.columns) == [2, 3]
    assert logger.warning_counts == {"ColsTruncated": 1}
