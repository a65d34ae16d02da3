"""Sample Parquet data for engine tests.

Files are written with DuckDB's COPY so their column types are exactly
what DuckDB declares when it reads them back.
"""

from pathlib import Path

import duckdb

ORDERS_SQL = """
    SELECT *
    FROM (VALUES
        (1, 'Widget A', 99.99::DOUBLE, TRUE, DATE '2024-01-01', 10::BIGINT,
         TIMESTAMP '2024-01-01 10:30:00', 12.50::DECIMAL(10, 2)),
        (2, 'Widget B', 149.99::DOUBLE, FALSE, DATE '2024-01-02', 5::BIGINT,
         TIMESTAMP '2024-01-02 11:00:00', 0.00::DECIMAL(10, 2)),
        (3, 'Gadget X', 29.99::DOUBLE, TRUE, DATE '2024-01-03', 20::BIGINT,
         TIMESTAMP '2024-01-03 09:15:00', 2.25::DECIMAL(10, 2))
    ) AS t(id, product_name, price, in_stock, sale_date, quantity, created_at, discount)
"""

CUSTOMERS_SQL = """
    SELECT *
    FROM (VALUES
        (1, 'Ada', 'MAHARASHTRA'),
        (2, 'Grace', 'KARNATAKA')
    ) AS t(id, name, state)
"""


def write_parquet(path: Path, select_sql: str) -> Path:
    """Write the result of ``select_sql`` to ``path`` as Parquet.

    Args:
        path: Destination file; parent directories are created.
        select_sql: Query producing the rows.

    Returns:
        The written path.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = duckdb.connect(":memory:")
    try:
        conn.execute(f"COPY ({select_sql}) TO '{path}' (FORMAT PARQUET)")
    finally:
        conn.close()
    return path


def generate_sample_files(static_dir: Path) -> dict[str, str]:
    """Write sample files under ``static_dir``.

    Returns:
        Mapping of fixture name -> location relative to ``static_dir``.
    """
    write_parquet(static_dir / "data" / "sales" / "orders.parquet", ORDERS_SQL)
    write_parquet(static_dir / "data" / "crm" / "customers.parquet", CUSTOMERS_SQL)
    # Same stem as the sales file, different source directory
    write_parquet(static_dir / "data" / "archive" / "orders.parquet", ORDERS_SQL)
    return {
        "orders": "data/sales/orders.parquet",
        "customers": "data/crm/customers.parquet",
        "archived_orders": "data/archive/orders.parquet",
    }
