from pathlib import Path

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

"""
Core Settings.

Rôle (fonctionnel) :
- Centralise la configuration du serveur via variables d’environnement (Pydantic Settings).
- Charge un fichier .env (racine du projet) pour faciliter le dev/local.
- Les sections imbriquées sont adressées avec "__" : SERVER__PORT=9000, GEO__MAXMIND_PATH=...

Organisation :
- server : identité, port, URL publique, auth, logs serveur.
- geo : base MaxMind.
- log : journal des events (sink aval).
- synchronization_service : timeouts de synchronisation.
- metrics : activation Prometheus.

Notes :
- Les settings ne sont jamais lus via un global : ils sont passés explicitement
  à init_app_config() puis exposés par AppConfig.
"""

# Pointe vers <racine projet>/.env
ENV_PATH = Path(__file__).resolve().parents[2] / ".env"

# Emplacement fixe du fichier d’identité serveur
SERVER_NAME_FILE = "/resources/server.name"


class ServerLogSettings(BaseModel):
    # Vide : logs serveur sur stdout uniquement
    path: str = ""
    level: str = "INFO"
    rotation_min: int = 1440
    max_backups: int = 0


class ServerSettings(BaseModel):
    name: str = ""
    name_file: str = SERVER_NAME_FILE
    port: str = "8001"
    public_url: str = ""
    static_files_dir: str = "./web"

    # --- Auth ---
    # Tokens statiques, ou fichier JSON (liste de tokens) rechargé périodiquement
    auth: list[str] = []
    auth_file: str = ""
    auth_reload_sec: int = 30

    destinations_reload_sec: int = 40

    log: ServerLogSettings = ServerLogSettings()


class GeoSettings(BaseModel):
    maxmind_path: str = "/home/eventgate/app/res/"


class EventLogSettings(BaseModel):
    path: str = "/home/eventgate/logs/events"
    # "file" | "stdout"
    type: str = "file"
    show_in_server: bool = False
    rotation_min: int = 5


class SynchronizationServiceSettings(BaseModel):
    connection_timeout_seconds: int = 20


class MetricsSettings(BaseModel):
    enabled: bool = False


class Settings(BaseSettings):
    # --- App ---
    APP_NAME: str = "eventgate"
    ENV: str = "dev"

    # Override du port d’écoute (prioritaire sur server.port)
    port: str = ""

    server: ServerSettings = ServerSettings()
    geo: GeoSettings = GeoSettings()
    log: EventLogSettings = EventLogSettings()
    synchronization_service: SynchronizationServiceSettings = SynchronizationServiceSettings()
    metrics: MetricsSettings = MetricsSettings()

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )
