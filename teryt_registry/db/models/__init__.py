# Import models so that SQLAlchemy knows them when needed (e.g., metadata, migrations autogenerate).
# Keep this file lightweight: only imports.

from teryt_registry.db.models.buildings import Building  # noqa: F401
from teryt_registry.db.models.providers import Provider  # noqa: F401
from teryt_registry.db.models.teryt import (  # noqa: F401
    City,
    CityDistrict,
    Community,
    District,
    Street,
    Voivodeship,
)
