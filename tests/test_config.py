import logging

import pytest

from excel_data_parser import InvalidArgumentError, LogLevel, ParserConfig, load_config, parse_sheet
from excel_data_parser.logger import DualLogger


def test_defaults():
    config = ParserConfig()

    assert config.keywords == ["var", "type", "default"]
    assert config.max_rows == 10000
    assert config.max_nesting_level == 10
    assert config.strict_validation is True
    assert config.log_level == LogLevel.INFO
    assert config.supported_extensions == (".xlsx", ".xlsm", ".xlsb", ".csv")


def test_custom_keywords_extend_builtins():
    config = ParserConfig(custom_keywords=["desc"])

    assert config.keywords == ["var", "type", "default", "desc"]
    assert config.canonical_keyword("DESC") == "desc"
    assert config.is_keyword("Var")
    assert not config.is_keyword("description")


def test_case_sensitive_matching():
    config = ParserConfig(case_sensitive=True)

    assert config.canonical_keyword("Var") is None
    assert config.is_valid_type("int")
    assert not config.is_valid_type("INT")
    assert not config.is_valid_identifier("")


def test_identifier_pattern():
    config = ParserConfig()

    assert config.is_valid_identifier("max_hp2")
    assert not config.is_valid_identifier("2hp")
    assert not config.is_valid_identifier("hp-max")


@pytest.mark.parametrize("field", ["max_rows", "max_cols", "max_nesting_level"])
def test_non_positive_limits_rejected(field):
    with pytest.raises(InvalidArgumentError):
        ParserConfig(**{field: 0})


def test_bad_identifier_pattern_rejected():
    with pytest.raises(InvalidArgumentError):
        ParserConfig(variable_name_pattern="([a-z")


def test_string_log_level_and_extensions_are_normalized():
    config = ParserConfig(log_level="debug", supported_extensions=[".XLSX", ".csv"])

    assert config.log_level == LogLevel.DEBUG
    assert config.supported_extensions == (".xlsx", ".csv")


def test_load_config_from_yaml(tmp_path):
    path = tmp_path / "parser.yml"
    path.write_text(
        "custom_keywords: [desc]\n"
        "max_rows: 50\n"
        "valid_types: [string, int, list]\n"
        "fail_fast: true\n"
        "log_level: WARN\n",
        encoding="utf-8",
    )
    config = load_config(path)

    assert config.custom_keywords == ["desc"]
    assert config.max_rows == 50
    assert config.valid_types == ("string", "int", "list")
    assert config.fail_fast is True
    assert config.log_level == LogLevel.WARN


def test_load_config_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "empty.yml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == ParserConfig()


def test_load_config_rejects_unknown_keys(tmp_path):
    path = tmp_path / "parser.yml"
    path.write_text("max_rowz: 5\n", encoding="utf-8")

    with pytest.raises(InvalidArgumentError) as exc_info:
        load_config(path)
    assert "max_rowz" in str(exc_info.value)


def test_load_config_rejects_non_mapping(tmp_path):
    path = tmp_path / "parser.yml"
    path.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(InvalidArgumentError):
        load_config(path)


def test_load_config_missing_file(tmp_path):
    with pytest.raises(InvalidArgumentError):
        load_config(tmp_path / "missing.yml")


def test_logger_counts_warnings_below_level(make_grid):
    # WARN 以下级别被过滤时仍然计数
    logger = DualLogger(log_level=LogLevel.ERROR)
    grid = make_grid([
        ["#var", "Name", "Stats"],
        ["#var", None, "Hp"],
        ["#type", "string", "int"],
        [None, "Alice", "1"],
    ])
    parse_sheet(grid, ParserConfig(), logger)
    assert logger.warning_counts == {"ColumnDropped": 1}


def test_dropped_column_warning_reaches_std_logging(make_grid, caplog):
    grid = make_grid([
        ["#var", "Name", "Bad-Name"],
        ["#type", "string", "string"],
        [None, "Alice", "x"],
    ])
    with caplog.at_level(logging.WARNING, logger="excel_data_parser"):
        parse_sheet(grid)

    warnings = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "warning=InvalidIdentifier" in warnings[0]


def test_logger_writes_files(tmp_path):
    logger = DualLogger(tmp_path / "logs")
    logger.log("run.start", file="a.xlsx", metrics={"n": 1})
    logger.close()

    text = (tmp_path / "logs" / "run.log.jsonl").read_text(encoding="utf-8")
    assert '"event": "run.start"' in text
    assert '"file": "a.xlsx"' in text
