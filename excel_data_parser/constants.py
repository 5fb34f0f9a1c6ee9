"""
常量定义
"""

# 表头标记
HEADER_MARKER = "#"
HEADER_COLUMN = 1
FIRST_DATA_COLUMN = 2

# 内置关键词
KEYWORD_VAR = "var"
KEYWORD_TYPE = "type"
KEYWORD_DEFAULT = "default"
BUILTIN_KEYWORDS = (KEYWORD_VAR, KEYWORD_TYPE, KEYWORD_DEFAULT)

# 字段路径
PATH_SEPARATOR = "."
LIST_TYPE_MARKER = "list"

# 输出结构中的保留键
KEY_SHEET_NAME = "_sheetName"
KEY_TYPE_LOOKUP = "_typeLookup"
KEY_DATA_LIST = "_dataList"
RESERVED_KEYS = (KEY_SHEET_NAME, KEY_TYPE_LOOKUP, KEY_DATA_LIST)

# 默认限制
DEFAULT_MAX_ROWS = 10000
DEFAULT_MAX_COLS = 1000
DEFAULT_MAX_NESTING_LEVEL = 10
DEFAULT_MAX_FILE_SIZE_MB = 100.0
DEFAULT_VARIABLE_NAME_PATTERN = r"^[a-zA-Z_][a-zA-Z0-9_]*$"
DEFAULT_VALID_TYPES = ("string", "int", "float", "double", "bool", "list", "array", "object")
DEFAULT_SUPPORTED_EXTENSIONS = (".xlsx", ".xlsm", ".xlsb", ".csv")

# 读取
CSV_ENCODINGS = ("utf-8", "utf-8-sig", "gbk", "gb2312", "latin-1")

# 导出
JSON_ENCODING = "utf-8"
JSON_INDENT = 2
INVALID_FILENAME_CHARS = '<>:"/\\|?*'
RUN_TS_FORMAT = "%Y%m%dT%H%M%S"
DIR_JSON = "json"
DIR_ARTIFACTS = "artifacts"
DIR_LOGS = "logs"
