# src/mill_atlas/infrastructure/db/_types.py
"""
PostGIS column types.

Values cross the Python boundary as WKT text: binds go through
`ST_GeomFromText`/`ST_GeogFromText` with SRID 4326 and selects come back
through `ST_AsText`, so the ORM never handles EWKB.
"""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import cast, func
from sqlalchemy.sql.elements import ColumnElement
from sqlalchemy.types import Float, UserDefinedType

SRID = 4326


class _PostgisType(UserDefinedType):
    cache_ok = True
    base_name = "geometry"

    def __init__(self, geometry_type: Optional[str] = None, srid: int = SRID):
        self.geometry_type = geometry_type
        self.srid = srid

    def get_col_spec(self, **kw: Any) -> str:
        if self.geometry_type is None:
            return self.base_name
        return f"{self.base_name}({self.geometry_type},{self.srid})"

    def column_expression(self, col):
        return func.ST_AsText(col, type_=self)

    def result_processor(self, dialect, coltype):
        return None


class Geometry(_PostgisType):
    base_name = "geometry"

    def bind_expression(self, bindvalue):
        return func.ST_GeomFromText(bindvalue, self.srid, type_=self)


class Geography(_PostgisType):
    base_name = "geography"

    def bind_expression(self, bindvalue):
        return func.ST_GeogFromText(
            func.concat(f"SRID={self.srid};", bindvalue), type_=self
        )


def as_geometry(col: Any) -> ColumnElement[Any]:
    """`col::geometry`, required by ST_X/ST_Y on geography columns."""
    return cast(col, Geometry())


def lng_of(col: Any) -> ColumnElement[float]:
    return func.ST_X(as_geometry(col), type_=Float())


def lat_of(col: Any) -> ColumnElement[float]:
    return func.ST_Y(as_geometry(col), type_=Float())


def wkt_of(col: Any) -> ColumnElement[str]:
    return func.ST_AsText(col)
