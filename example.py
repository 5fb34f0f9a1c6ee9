"""
使用示例
"""
from excel_data_parser import parse_file, ParserConfig, load_config


# 示例 1: 解析 Excel 文件的全部工作表
def example_xlsx():
    results, manifest = parse_file(
        file_path="inputs/GameConfig.xlsx",
        output_dir="outputs",
        export_json=True,
        config=ParserConfig(custom_keywords=["description", "category"]),
    )

    for sheet, result in results.items():
        print(f"\n{sheet}:")
        print(f"  物理行数: {result.physical_rows}")
        print(f"  逻辑记录数: {len(result.records)}")
        print(f"  元数据: {result.metadata}")
        print(f"  类型表: {result.type_lookup}")
        for record in result.records[:3]:
            print(f"  {record.to_python()}")

    for sheet, error in manifest.errors.items():
        print(f"  {sheet} 解析失败: {error}")


# 示例 2: 按路径取值
def example_query():
    results, _ = parse_file("inputs/GameConfig.xlsx", sheet_name="Items")
    names = results["Items"].query("Items.Name")
    print([value.to_python() for value in names])


# 示例 3: 从 YAML 加载配置
def example_custom_config():
    config = load_config("parser.yml")
    results, _ = parse_file("inputs/GameConfig.xlsx", config=config)
    for sheet, result in results.items():
        print(result.to_dataframe().head())


if __name__ == "__main__":
    print("Excel Data Parser 使用示例")
    print("=" * 50)

    # 运行示例（需要实际文件）
    # example_xlsx()
    # example_query()
    # example_custom_config()

    print("\n请将示例文件路径替换为实际文件路径后运行")
