"""Fixed prompt prefixes and the default schema description."""

from __future__ import annotations

from pathlib import Path

DEFAULT_SCHEMA = """CREATE TABLE orders (
  `id` INT AUTO_INCREMENT PRIMARY KEY,
  `name` VARCHAR(50),
  `product_name` VARCHAR(255),
  `price` DECIMAL(10,2),
  `order_date` DATE,
  `order_status` VARCHAR(100),
  INDEX `idx_product_name` (`product_name`),
  INDEX `idx_order_status` (`order_status`)
);"""

QUERY_INSTRUCTIONS = (
    "You are an expert database assistant. "
    "Convert the following user request into an optimized SQL query in {dialect} using this database schema. "
    "The output must be plain text, don't use a code wrapper or markdown formatting."
)

DEFAULT_DIALECT = "MySQL"
DIALECT_NAMES = {
    "mariadb": "MariaDB",
    "mssql": "SQL Server",
    "mysql": "MySQL",
    "oracle": "Oracle",
    "postgresql": "PostgreSQL",
    "sqlite": "SQLite",
}

REPLY_INSTRUCTIONS = (
    "You are a helpful assistant. "
    "Based on the data provided, compose a friendly and concise message summarizing the information for the user. "
    "Use clear language and format the message with numbers or bullets for readability. "
    "Don't use markdown formatting, write plain text only. "
    "Do not include any technical jargon. Use the same language as the user used."
)


def load_schema(schema_file: Path | None) -> str:
    """Return the schema description, read once from ``schema_file`` when given."""
    if schema_file is None:
        return DEFAULT_SCHEMA
    return schema_file.read_text(encoding="utf-8").strip()


def dialect_label(name: str) -> str:
    """Readable name for a SQLAlchemy dialect name such as ``postgresql``."""
    return DIALECT_NAMES.get(name, name)


def query_prompt(schema: str, user_text: str, dialect: str = DEFAULT_DIALECT) -> str:
    instructions = QUERY_INSTRUCTIONS.format(dialect=dialect)
    return f"{instructions}\n\n{schema}\n\nUser request: {user_text}"


def reply_prompt(user_text: str, data: str) -> str:
    return f"{REPLY_INSTRUCTIONS}\n\nOriginal request: {user_text}\n\nData: {data}"
