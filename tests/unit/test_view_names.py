"""Tests for view name derivation and path normalization."""

from __future__ import annotations

import pytest

from universal_sql.core.config import Settings
from universal_sql.engine.registrar import (
    describe_view,
    has_url_scheme,
    normalize_path,
    resolve_location,
    table_stem,
)


class TestTableStem:
    """File stem extraction."""

    def test_strips_extension(self) -> None:
        assert table_stem("static/data/orders.parquet") == "orders"

    def test_strips_exactly_one_extension(self) -> None:
        assert table_stem("/data/orders.2024.parquet") == "orders.2024"

    def test_backslash_separators(self) -> None:
        assert table_stem("data\\sales\\orders.parquet") == "orders"

    def test_url(self) -> None:
        assert table_stem("https://cdn.example.com/sets/orders.parquet") == "orders"

    def test_no_extension(self) -> None:
        assert table_stem("data/orders") == "orders"


class TestNormalizePath:
    """Location normalization."""

    def test_http_passes_through(self) -> None:
        url = "https://cdn.example.com/static/orders.parquet"
        assert normalize_path(url) == url

    def test_s3_passes_through(self) -> None:
        assert normalize_path("s3://bucket/orders.parquet") == "s3://bucket/orders.parquet"

    def test_relative_becomes_root_absolute(self) -> None:
        assert normalize_path("data/orders.parquet") == "/data/orders.parquet"

    def test_absolute_unchanged(self) -> None:
        assert normalize_path("/data/orders.parquet") == "/data/orders.parquet"

    def test_static_prefix_stripped(self) -> None:
        assert normalize_path("/static/data/orders.parquet") == "/data/orders.parquet"

    def test_relative_static_prefix_stripped(self) -> None:
        assert normalize_path("static/data/orders.parquet") == "/data/orders.parquet"

    def test_prefix_needs_segment_boundary(self) -> None:
        assert normalize_path("/staticfiles/orders.parquet") == "/staticfiles/orders.parquet"

    def test_custom_prefix(self) -> None:
        assert normalize_path("/public/a.parquet", static_prefix="/public") == "/a.parquet"

    def test_windows_drive_is_not_a_scheme(self) -> None:
        assert has_url_scheme("C:\\data\\a.parquet") is False
        assert has_url_scheme("http://host/a.parquet") is True


class TestDescribeView:
    """ViewDescriptor derivation."""

    def test_descriptor_fields(self) -> None:
        descriptor = describe_view("sales", "static/data/sales/orders.parquet")

        assert descriptor.schema_name == "sales"
        assert descriptor.table_name == "orders"
        assert descriptor.file_name == "sales_orders.parquet"
        assert descriptor.location == "static/data/sales/orders.parquet"
        assert descriptor.path == "/data/sales/orders.parquet"
        assert descriptor.qualified_name == '"sales"."orders"'

    def test_same_stem_different_sources_do_not_collide(self) -> None:
        first = describe_view("sales", "data/sales/orders.parquet")
        second = describe_view("archive", "data/archive/orders.parquet")

        assert first.table_name == second.table_name
        assert first.file_name != second.file_name
        assert first.qualified_name != second.qualified_name

    def test_empty_stem_rejected(self) -> None:
        with pytest.raises(ValueError):
            describe_view("sales", "data/.parquet")

    def test_identifier_quotes_escaped(self) -> None:
        descriptor = describe_view('we"ird', "data/t.parquet")
        assert descriptor.qualified_name == '"we""ird"."t"'


class TestResolveLocation:
    """Normalized path -> readable location."""

    def test_static_dir(self, tmp_path) -> None:
        settings = Settings(STATIC_DIR=str(tmp_path), ASSET_BASE_URL=None)
        resolved = resolve_location("/data/orders.parquet", settings)
        assert resolved == str(tmp_path / "data" / "orders.parquet")

    def test_asset_base_url(self) -> None:
        settings = Settings(ASSET_BASE_URL="http://localhost:3000/")
        resolved = resolve_location("/data/orders.parquet", settings)
        assert resolved == "http://localhost:3000/data/orders.parquet"

    def test_url_untouched(self) -> None:
        settings = Settings(ASSET_BASE_URL="http://localhost:3000")
        url = "https://cdn.example.com/orders.parquet"
        assert resolve_location(url, settings) == url
