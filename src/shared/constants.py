from enum import Enum

# Базовый размер тайла Web Mercator (пикселей)
TILE_SIZE = 256

# Максимальный поддерживаемый уровень приближения (OSM отдаёт тайлы до 19)
MAX_ZOOM = 19

# Уровень приближения по умолчанию
DEFAULT_ZOOM = 18

# Ограничение размера сетки тайлов по каждой оси (64x64 тайла ~ 16384x16384 px)
MAX_GRID_TILES_X = 64
MAX_GRID_TILES_Y = 64

# --- Константы Web Mercator и XYZ
# Предельная широта Web Mercator: atan(sinh(pi)) в градусах
MERCATOR_MAX_LAT_DEG = 85.0511287798066
WORLD_LNG_SPAN_DEG = 360.0
WORLD_LNG_HALF_SPAN_DEG = 180.0
WORLD_LAT_MAX_DEG = 90.0

# Источник тайлов по умолчанию
OSM_TILE_URL_TEMPLATE = 'https://tile.openstreetmap.org/{z}/{x}/{y}.png'
# Политика OSM требует осмысленный User-Agent
DEFAULT_USER_AGENT = 'route-map/1.0 (static route map renderer)'

# openrouteservice: геокодирование и маршруты
OPENROUTESERVICE_BASE = 'https://api.openrouteservice.org'
OPENROUTESERVICE_GEOCODE_PATH = '/geocode/search'
OPENROUTESERVICE_DIRECTIONS_PATH = '/v2/directions/driving-car'

# Имя переменной окружения с API-ключом openrouteservice
API_KEY_ENV_VAR = 'API_KEY'

# Количество видимых символов API-ключа при маскировке
API_KEY_VISIBLE_PREFIX_LEN = 4

# Максимальное число параллельных загрузок тайлов
DOWNLOAD_CONCURRENCY = 8

# --- Параметры сетевых запросов по умолчанию
HTTP_TIMEOUT_DEFAULT = 20.0
HTTP_RETRIES_DEFAULT = 4
HTTP_BACKOFF_FACTOR = 1.6

# HTTP диапазоны ошибок сервера
HTTP_5XX_MIN = 500
HTTP_5XX_MAX = 600

# --- Опции HTTP-кэша
HTTP_CACHE_DIR = '.cache/tiles'
# Время жизни (TTL) в часах
HTTP_CACHE_EXPIRE_HOURS = 168

# --- Отрисовка маршрута
ROUTE_COLOR = (255, 0, 0, 255)
ROUTE_WIDTH_PX = 10

# Минимальное количество точек для рисования линии (draw.line требует >= 2)
MIN_POINTS_FOR_LINE = 2

# Фон холста до размещения тайлов (прозрачный)
CANVAS_BACKGROUND = (0, 0, 0, 0)

# Цвета маркеров
MARKER_RED = (220, 20, 20, 255)
MARKER_OUTLINE = (90, 0, 0, 255)

# Каталог для сохранения карт по умолчанию
DEFAULT_OUTPUT_DIR = 'maps'

# Каталог профилей настроек
PROFILES_DIR = 'configs/profiles'


class MarkerStyle(str, Enum):
    PIN_RED_16PX = 'PIN_RED_16PX'
    PIN_RED_32PX = 'PIN_RED_32PX'
    MARKER_RED_16PX = 'MARKER_RED_16PX'
    MARKER_RED_32PX = 'MARKER_RED_32PX'
