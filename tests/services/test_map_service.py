"""Tests for services.map_service module."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from PIL import Image

from conftest import TILE_COLOR, SolidTileSource
from domain.errors import (
    InvalidGeometryError,
    OversizedGridError,
    TileFetchError,
)
from domain.models import (
    BoundingBox,
    GeoCoordinate,
    MapSettings,
    MarkerPlacement,
)
from geo.projection import coord_to_pixel
from imaging.crop import compute_crop_rect
from imaging.markers import get_marker_icon
from services.map_service import (
    RouteMapService,
    generate_map_image,
    generate_map_image_sync,
    safe_filename,
)
from shared.constants import ROUTE_COLOR, MarkerStyle
from tiles.coverage import plan_tile_grid

ZOOM = 14


def _markers(*coords, style=MarkerStyle.PIN_RED_32PX):
    return [MarkerPlacement(c, style) for c in coords]


def _crop_px(coord, bbox, zoom=ZOOM):
    """Pixel of a coordinate inside the cropped output."""
    grid = plan_tile_grid(bbox, zoom)
    rect = compute_crop_rect(bbox, grid, zoom)
    wx, wy = coord_to_pixel(coord, zoom)
    ox, oy = grid.origin_px
    return wx - ox - rect.left, wy - oy - rect.top


class TestGenerateMapImage:
    """End-to-end tests with a deterministic tile source."""

    @pytest.mark.asyncio
    async def test_vienna_route(self, vienna, vienna_east, tile_source):
        """Full pipeline: tiles, route, markers and crop."""
        bbox = BoundingBox.from_endpoints(vienna, vienna_east)
        grid = plan_tile_grid(bbox, ZOOM)
        rect = compute_crop_rect(bbox, grid, ZOOM)
        mid = GeoCoordinate(
            lon=(vienna.lon + vienna_east.lon) / 2,
            lat=(vienna.lat + vienna_east.lat) / 2,
        )

        img = await generate_map_image(
            vienna,
            vienna_east,
            [vienna, mid, vienna_east],
            ZOOM,
            _markers(vienna, vienna_east),
            tile_source,
        )

        assert (grid.tiles_x, grid.tiles_y) == (2, 2)
        assert len(tile_source.calls) == 4
        assert img.size == (rect.width, rect.height)
        assert img.mode == 'RGBA'
        # North-west corner is plain map
        assert img.getpixel((0, 0)) == TILE_COLOR
        # Route passes through the midpoint
        mx, my = _crop_px(mid, bbox)
        assert img.getpixel((int(mx), int(my))) == ROUTE_COLOR
        # Start marker stem reaches into the bottom-left corner
        sx, sy = _crop_px(vienna, bbox)
        assert int(sx) == 0
        assert int(sy) >= img.height
        anchor_color = get_marker_icon(MarkerStyle.PIN_RED_32PX).anchor_color()
        assert img.getpixel((0, img.height - 1)) == anchor_color

    @pytest.mark.asyncio
    async def test_endpoint_order_does_not_matter(self, vienna, vienna_east):
        """Swapping start and end gives the same image."""
        route = [vienna, vienna_east]
        a = await generate_map_image(
            vienna, vienna_east, route, ZOOM, _markers(vienna), SolidTileSource()
        )
        b = await generate_map_image(
            vienna_east, vienna, route, ZOOM, _markers(vienna), SolidTileSource()
        )
        assert a.tobytes() == b.tobytes()

    @pytest.mark.asyncio
    async def test_no_crop_returns_canvas(self, vienna, vienna_east, tile_source):
        """crop_image=False returns the whole stitched canvas."""
        options = MapSettings(zoom=ZOOM, crop_image=False)
        img = await generate_map_image(
            vienna, vienna_east, [], ZOOM, [], tile_source, options=options
        )
        assert img.size == (512, 512)
        assert img.getpixel((0, 0)) == TILE_COLOR

    @pytest.mark.asyncio
    async def test_route_options_applied(self, vienna, vienna_east, tile_source):
        """Route colour comes from the options."""
        green = (0, 255, 0, 255)
        options = MapSettings(route_color=green, route_width_px=6)
        bbox = BoundingBox.from_endpoints(vienna, vienna_east)
        mid = GeoCoordinate(
            lon=(vienna.lon + vienna_east.lon) / 2,
            lat=(vienna.lat + vienna_east.lat) / 2,
        )
        img = await generate_map_image(
            vienna, vienna_east, [vienna, vienna_east], ZOOM, [], tile_source, options=options
        )
        mx, my = _crop_px(mid, bbox)
        assert img.getpixel((int(mx), int(my))) == green

    @pytest.mark.asyncio
    async def test_tile_failure_aborts(self, vienna, vienna_east):
        """Any tile failure fails the whole request."""
        bbox = BoundingBox.from_endpoints(vienna, vienna_east)
        bad = next(iter(plan_tile_grid(bbox, ZOOM)))
        source = SolidTileSource(fail_on={bad})
        with pytest.raises(TileFetchError) as exc:
            await generate_map_image(
                vienna, vienna_east, [vienna, vienna_east], ZOOM, [], source
            )
        assert exc.value.tile == bad

    @pytest.mark.asyncio
    async def test_degenerate_bbox_fails_before_fetch(self, vienna, tile_source):
        """start == end is rejected without fetching any tile."""
        with pytest.raises(InvalidGeometryError):
            await generate_map_image(vienna, vienna, [vienna], ZOOM, [], tile_source)
        assert tile_source.calls == []

    @pytest.mark.asyncio
    async def test_oversized_grid_fails_before_fetch(self, tile_source):
        """Too many tiles is rejected without fetching."""
        with pytest.raises(OversizedGridError):
            await generate_map_image(
                GeoCoordinate(2.35, 48.85),
                GeoCoordinate(16.37, 48.21),
                [],
                ZOOM,
                [],
                tile_source,
            )
        assert tile_source.calls == []

    def test_sync_wrapper(self, vienna, vienna_east, tile_source):
        """Synchronous wrapper runs the pipeline in its own event loop."""
        img = generate_map_image_sync(
            vienna, vienna_east, [vienna, vienna_east], ZOOM, [], tile_source
        )
        bbox = BoundingBox.from_endpoints(vienna, vienna_east)
        rect = compute_crop_rect(bbox, plan_tile_grid(bbox, ZOOM), ZOOM)
        assert img.size == (rect.width, rect.height)


class TestSafeFilename:
    """Tests for safe_filename function."""

    @pytest.mark.parametrize(
        ('name', 'expected'),
        [
            ('Wien-Graz', 'Wien-Graz'),
            ('Stephansplatz 1, Wien-Prater', 'Stephansplatz 1, Wien-Prater'),
            ('a/b\\c:d', 'a_b_c_d'),
            ('  ..hidden.. ', 'hidden'),
            ('///', '_'),
            ('', 'map'),
        ],
    )
    def test_cleaning(self, name, expected):
        """Path separators and odd characters are replaced."""
        assert safe_filename(name) == expected


class TestRouteMapService:
    """Tests for RouteMapService class."""

    @pytest.fixture
    def fake_session(self):
        cm = MagicMock()
        cm.__aenter__ = AsyncMock(return_value=MagicMock())
        cm.__aexit__ = AsyncMock(return_value=False)
        return cm

    def test_save_image(self, tmp_path):
        """Image is written as PNG into output_dir."""
        service = RouteMapService('key', MapSettings(output_dir=str(tmp_path / 'out')))
        path = service.save_image(Image.new('RGBA', (10, 5), TILE_COLOR), 'A/B-C')
        assert path == tmp_path / 'out' / 'A_B-C.png'
        with Image.open(path) as saved:
            assert saved.format == 'PNG'
            assert saved.size == (10, 5)

    @pytest.mark.asyncio
    async def test_get_map(self, tmp_path, vienna, vienna_east, fake_session):
        """Addresses are geocoded, routed, rendered and saved."""
        settings = MapSettings(
            zoom=ZOOM,
            output_dir=str(tmp_path),
            marker_style=MarkerStyle.MARKER_RED_16PX,
        )
        ors = MagicMock()
        ors.geocode = AsyncMock(side_effect=[vienna, vienna_east])
        ors.fetch_route = AsyncMock(return_value=[vienna, vienna_east])
        source = SolidTileSource()

        with (
            patch('services.map_service.make_http_session', return_value=fake_session) as mk,
            patch('services.map_service.OpenRouteServiceClient', return_value=ors) as ors_cls,
            patch('services.map_service.OsmTileSource', return_value=source),
        ):
            path = await RouteMapService('secret', settings).get_map('Wien', 'Prater')

        assert path == tmp_path / 'Wien-Prater.png'
        assert path.exists()
        mk.assert_called_once_with(None, user_agent=settings.user_agent)
        assert ors_cls.call_args.args[1] == 'secret'
        ors.fetch_route.assert_awaited_once_with(vienna, vienna_east)
        assert len(source.calls) == 4

    @pytest.mark.asyncio
    async def test_cache_dir_used_when_enabled(self, tmp_path, vienna, fake_session):
        """HTTP cache directory is passed when caching is on."""
        settings = MapSettings(zoom=ZOOM, http_cache_enabled=True, output_dir=str(tmp_path))
        ors = MagicMock()
        ors.geocode = AsyncMock(return_value=vienna)
        ors.fetch_route = AsyncMock(return_value=[vienna])
        with (
            patch('services.map_service.resolve_cache_dir', return_value=tmp_path / 'c'),
            patch('services.map_service.make_http_session', return_value=fake_session) as mk,
            patch('services.map_service.OpenRouteServiceClient', return_value=ors),
            patch('services.map_service.OsmTileSource', return_value=SolidTileSource()),
            pytest.raises(InvalidGeometryError),
        ):
            await RouteMapService('k', settings).render('Same', 'Same')
        assert mk.call_args.args[0] == tmp_path / 'c'
