from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from pydantic import BaseModel, field_validator

from domain.errors import InvalidGeometryError
from shared.constants import (
    DEFAULT_OUTPUT_DIR,
    DEFAULT_USER_AGENT,
    DEFAULT_ZOOM,
    DOWNLOAD_CONCURRENCY,
    MAX_GRID_TILES_X,
    MAX_GRID_TILES_Y,
    MAX_ZOOM,
    OSM_TILE_URL_TEMPLATE,
    ROUTE_COLOR,
    ROUTE_WIDTH_PX,
    TILE_SIZE,
    MarkerStyle,
)


@dataclass(frozen=True)
class GeoCoordinate:
    """Географическая точка WGS84 (долгота, широта) в градусах."""

    lon: float
    lat: float


@dataclass(frozen=True)
class TileIndex:
    """Индекс slippy-тайла: X растёт на восток, Y растёт на юг."""

    x: int
    y: int


@dataclass(frozen=True)
class BoundingBox:
    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float

    def __post_init__(self) -> None:
        if self.min_lon > self.max_lon or self.min_lat > self.max_lat:
            msg = (
                f'Bounding box is not normalized: lon {self.min_lon}..{self.max_lon}, '
                f'lat {self.min_lat}..{self.max_lat}'
            )
            raise InvalidGeometryError(msg)

    @classmethod
    def from_endpoints(cls, a: GeoCoordinate, b: GeoCoordinate) -> BoundingBox:
        """Normalized box spanned by two points, independent of their order."""
        return cls(
            min_lon=min(a.lon, b.lon),
            min_lat=min(a.lat, b.lat),
            max_lon=max(a.lon, b.lon),
            max_lat=max(a.lat, b.lat),
        )

    @classmethod
    def from_points(cls, points: Iterable[GeoCoordinate]) -> BoundingBox:
        """Smallest box containing every point."""
        pts = list(points)
        if not pts:
            msg = 'Cannot build a bounding box from an empty point set'
            raise InvalidGeometryError(msg)
        return cls(
            min_lon=min(p.lon for p in pts),
            min_lat=min(p.lat for p in pts),
            max_lon=max(p.lon for p in pts),
            max_lat=max(p.lat for p in pts),
        )

    @property
    def north_west(self) -> GeoCoordinate:
        return GeoCoordinate(lon=self.min_lon, lat=self.max_lat)

    @property
    def south_east(self) -> GeoCoordinate:
        return GeoCoordinate(lon=self.max_lon, lat=self.min_lat)

    def contains(self, point: GeoCoordinate) -> bool:
        return (
            self.min_lon <= point.lon <= self.max_lon
            and self.min_lat <= point.lat <= self.max_lat
        )


@dataclass(frozen=True)
class TileGrid:
    """
    Прямоугольный набор тайлов, покрывающий область карты.

    top_left: северо-западный тайл, bottom_right: юго-восточный (оба включительно).
    """

    top_left: TileIndex
    bottom_right: TileIndex
    tile_size: int = TILE_SIZE

    def __post_init__(self) -> None:
        if self.tiles_x < 1 or self.tiles_y < 1:
            msg = (
                f'Tile grid has non-positive extent {self.tiles_x}x{self.tiles_y} '
                f'(top_left={self.top_left}, bottom_right={self.bottom_right})'
            )
            raise InvalidGeometryError(msg)

    @property
    def tiles_x(self) -> int:
        return self.bottom_right.x - self.top_left.x + 1

    @property
    def tiles_y(self) -> int:
        return self.bottom_right.y - self.top_left.y + 1

    @property
    def width_px(self) -> int:
        return self.tiles_x * self.tile_size

    @property
    def height_px(self) -> int:
        return self.tiles_y * self.tile_size

    @property
    def origin_px(self) -> tuple[int, int]:
        """Мировые пиксельные координаты верхнего левого угла холста."""
        return self.top_left.x * self.tile_size, self.top_left.y * self.tile_size

    def __len__(self) -> int:
        return self.tiles_x * self.tiles_y

    def __iter__(self) -> Iterator[TileIndex]:
        """Tiles in row-major order (north to south, west to east)."""
        for y in range(self.top_left.y, self.bottom_right.y + 1):
            for x in range(self.top_left.x, self.bottom_right.x + 1):
                yield TileIndex(x, y)

    def __contains__(self, tile: object) -> bool:
        if not isinstance(tile, TileIndex):
            return False
        return (
            self.top_left.x <= tile.x <= self.bottom_right.x
            and self.top_left.y <= tile.y <= self.bottom_right.y
        )

    def tile_offset_px(self, tile: TileIndex) -> tuple[int, int]:
        """Смещение тайла на холсте относительно верхнего левого тайла."""
        return (
            (tile.x - self.top_left.x) * self.tile_size,
            (tile.y - self.top_left.y) * self.tile_size,
        )


@dataclass(frozen=True)
class MarkerPlacement:
    coord: GeoCoordinate
    style: MarkerStyle = MarkerStyle.PIN_RED_32PX


class MapSettings(BaseModel):
    """Установки генерации карты маршрута."""

    model_config = {
        'extra': 'ignore',  # игнорировать лишние поля из профилей
    }

    zoom: int = DEFAULT_ZOOM
    # Обрезать сшитое изображение по границам маршрута
    crop_image: bool = True

    # Ограничение размера сетки тайлов (защита памяти)
    max_tiles_x: int = MAX_GRID_TILES_X
    max_tiles_y: int = MAX_GRID_TILES_Y

    download_concurrency: int = DOWNLOAD_CONCURRENCY
    tile_url_template: str = OSM_TILE_URL_TEMPLATE
    user_agent: str = DEFAULT_USER_AGENT
    http_cache_enabled: bool = False

    route_color: tuple[int, int, int, int] = ROUTE_COLOR
    route_width_px: int = ROUTE_WIDTH_PX
    marker_style: MarkerStyle = MarkerStyle.PIN_RED_32PX

    # Каталог для сохранения PNG
    output_dir: str = DEFAULT_OUTPUT_DIR

    @field_validator('zoom')
    @classmethod
    def validate_zoom(cls, v: int) -> int:
        if not (0 <= v <= MAX_ZOOM):
            msg = f'zoom must be in range [0, {MAX_ZOOM}]'
            raise ValueError(msg)
        return v

    @field_validator(
        'max_tiles_x', 'max_tiles_y', 'download_concurrency', 'route_width_px'
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            msg = 'value must be >= 1'
            raise ValueError(msg)
        return v

    @field_validator('route_color', mode='before')
    @classmethod
    def validate_route_color(cls, v: object) -> tuple[int, ...]:
        channels = tuple(int(c) for c in v)  # type: ignore[attr-defined]
        if len(channels) == 3:  # noqa: PLR2004
            channels = (*channels, 255)
        if len(channels) != 4 or any(not (0 <= c <= 255) for c in channels):  # noqa: PLR2004
            msg = 'route_color must be 3 or 4 channels in range [0, 255]'
            raise ValueError(msg)
        return channels

    @field_validator('tile_url_template')
    @classmethod
    def validate_tile_url(cls, v: str) -> str:
        for key in ('{z}', '{x}', '{y}'):
            if key not in v:
                msg = f'tile_url_template must contain {key}'
                raise ValueError(msg)
        return v
