"""Tests for local engine session coercions."""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal

import pyarrow as pa

from universal_sql.engine.local import apply_session_options, quote_identifier, quote_literal
from universal_sql.engine.platform import EngineOptions


class TestApplySessionOptions:
    """Portable type coercions."""

    def test_bigint_to_double(self) -> None:
        table = pa.table({"n": pa.array([1, 2**62], type=pa.int64())})

        coerced = apply_session_options(table, EngineOptions())

        assert coerced.schema.field("n").type == pa.float64()
        assert coerced.column("n").to_pylist() == [1.0, float(2**62)]

    def test_ubigint_to_double(self) -> None:
        table = pa.table({"n": pa.array([7], type=pa.uint64())})

        coerced = apply_session_options(table, EngineOptions())

        assert coerced.schema.field("n").type == pa.float64()

    def test_decimal_to_double(self) -> None:
        table = pa.table({"d": pa.array([Decimal("12.50")], type=pa.decimal128(10, 2))})

        coerced = apply_session_options(table, EngineOptions())

        assert coerced.schema.field("d").type == pa.float64()
        assert coerced.column("d").to_pylist() == [12.5]

    def test_timestamp_to_date(self) -> None:
        table = pa.table(
            {"t": pa.array([datetime(2024, 1, 2, 10, 30)], type=pa.timestamp("us"))}
        )

        coerced = apply_session_options(table, EngineOptions())

        assert pa.types.is_date(coerced.schema.field("t").type)
        assert str(coerced.column("t").to_pylist()[0])[:10] == "2024-01-02"

    def test_duration_to_time(self) -> None:
        table = pa.table(
            {"elapsed": pa.array([timedelta(minutes=5), None], type=pa.duration("ms"))}
        )

        coerced = apply_session_options(table, EngineOptions())

        assert coerced.schema.field("elapsed").type == pa.time64("us")
        assert coerced.column("elapsed").null_count == 1

    def test_narrow_types_untouched(self) -> None:
        table = pa.table(
            {
                "id": pa.array([1], type=pa.int32()),
                "name": pa.array(["a"], type=pa.string()),
            }
        )

        coerced = apply_session_options(table, EngineOptions())

        assert coerced.schema == table.schema

    def test_disabled_options_keep_types(self) -> None:
        table = pa.table({"n": pa.array([1], type=pa.int64())})
        options = EngineOptions(
            cast_bigint_to_double=False,
            cast_timestamp_to_date=False,
            cast_decimal_to_double=False,
            cast_duration_to_time64=False,
        )

        coerced = apply_session_options(table, options)

        assert coerced.schema.field("n").type == pa.int64()


class TestQuoting:
    def test_identifier(self) -> None:
        assert quote_identifier("sales") == '"sales"'
        assert quote_identifier('a"b') == '"a""b"'

    def test_literal(self) -> None:
        assert quote_literal("/tmp/o'brien.parquet") == "'/tmp/o''brien.parquet'"
