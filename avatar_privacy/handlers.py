from avatar_privacy.default_icons.generating_icon_provider import GeneratingIconProvider
from avatar_privacy.default_icons.generators.monster_id import MonsterId
from avatar_privacy.default_icons.generators.shapes import Shapes
from avatar_privacy.default_icons.icon_provider_registry import IconProviderRegistry
from avatar_privacy.default_icons.static_icon_provider import StaticIconProvider
from avatar_privacy.lib.file_cache import FileCache
from avatar_privacy.lib.transients import transients_for_topology
from avatar_privacy.services.cache_maintenance_service import CacheMaintenanceService
from avatar_privacy.services.default_icons_handler import DefaultIconsHandler
from avatar_privacy.services.gravatar_service import GravatarService

AVATAR_CACHE = FileCache()
TRANSIENTS = transients_for_topology()

ICON_PROVIDERS = IconProviderRegistry((
    StaticIconProvider(
        ('mystery', 'mm', 'mysteryman', 'silhouette'), 'Silhouette', 'mystery.svg'
    ),
    GeneratingIconProvider(
        MonsterId(), AVATAR_CACHE, ('monsterid', 'monster'), 'Monster (Generated)'
    ),
    GeneratingIconProvider(
        Shapes(), AVATAR_CACHE, ('geometric', 'shapes'), 'Geometric (Generated)'
    ),
))

DEFAULT_ICONS = DefaultIconsHandler(ICON_PROVIDERS)
GRAVATAR = GravatarService(TRANSIENTS)
CACHE_MAINTENANCE = CacheMaintenanceService(AVATAR_CACHE)
