from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

import geoip2.database
import geoip2.errors

"""
Geo Resolver.

Rôle (fonctionnel) :
- Définit le contrat GeoResolver : IP (str) -> GeoData, ou GeoResolverError.
- Fournit l’implémentation MaxMind (GeoLite2-City) basée sur geoip2.
- Fournit un resolver “indisponible” utilisé quand la base ne peut pas être ouverte
  au démarrage : le serveur tourne alors sans enrichissement geo (données vides).

Conventions :
- geo.maxmind_path peut pointer vers le fichier .mmdb ou vers son dossier
  (le fichier GeoLite2-City.mmdb y est alors cherché).
- Toute erreur de lookup est convertie en GeoResolverError (le preprocessing la logue
  et continue).
"""

log = logging.getLogger("eventgate.geo")

GEO_DATA_KEY = "geo"
MAXMIND_CITY_DB = "GeoLite2-City.mmdb"


@dataclass(frozen=True)
class GeoData:
    """Résultat geo sérialisable (stocké dans device_ctx.geo)."""
    country: str = ""
    region: str = ""
    city: str = ""
    zip: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class GeoResolverError(Exception):
    """Échec de construction ou de lookup ; data = résultat partiel éventuel."""

    def __init__(self, message: str, data: Optional[GeoData] = None) -> None:
        super().__init__(message)
        self.data = data


class GeoResolver(Protocol):
    available: bool

    def resolve(self, ip: str) -> GeoData:
        ...


class UnavailableGeoResolver:
    """Resolver de repli : aucune base chargée, retourne toujours un GeoData vide."""

    available = False

    def resolve(self, ip: str) -> GeoData:
        return GeoData()


class MaxMindGeoResolver:
    """Resolver geo sur base MaxMind GeoLite2-City (lecture locale, synchrone)."""

    available = True

    def __init__(self, path: str | Path) -> None:
        db_path = Path(path)
        if db_path.is_dir():
            db_path = db_path / MAXMIND_CITY_DB

        try:
            self._reader = geoip2.database.Reader(str(db_path))
        except (OSError, ValueError, RuntimeError) as exc:
            raise GeoResolverError(f"Impossible d’ouvrir la base MaxMind {db_path}: {exc}") from exc

        self.db_path = db_path
        log.info("MaxMind database loaded from %s", db_path)

    def resolve(self, ip: str) -> GeoData:
        try:
            response = self._reader.city(ip)
        except geoip2.errors.AddressNotFoundError as exc:
            raise GeoResolverError(f"IP {ip} absente de la base geo") from exc
        except (TypeError, ValueError) as exc:
            raise GeoResolverError(f"IP invalide: {ip!r}") from exc
        # enregistrement corrompu : maxminddb.InvalidDatabaseError hérite de RuntimeError
        except (geoip2.errors.GeoIP2Error, RuntimeError) as exc:
            raise GeoResolverError(f"Lookup geo en échec pour {ip}: {exc}") from exc

        return GeoData(
            country=response.country.iso_code or "",
            region=response.subdivisions.most_specific.iso_code or "",
            city=response.city.name or "",
            zip=response.postal.code or "",
            latitude=response.location.latitude,
            longitude=response.location.longitude,
        )

    def close(self) -> None:
        self._reader.close()


def create_geo_resolver(path: str | Path) -> MaxMindGeoResolver:
    """Construit le resolver MaxMind ; lève GeoResolverError si la base est inutilisable."""
    if not str(path):
        raise GeoResolverError("geo.maxmind_path non configuré")
    return MaxMindGeoResolver(path)
