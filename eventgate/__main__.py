import uvicorn

from eventgate.core.appconfig import listen_authority
from eventgate.core.settings import Settings
from eventgate.main import create_app

"""
Lancement du serveur : python -m eventgate

L’adresse d’écoute suit la même règle que le registre (override `port`, sinon server.port).
Le logging est configuré par le lifespan (init_app_config), pas par uvicorn.
"""


def main() -> None:
    settings = Settings()
    host, port = listen_authority(settings).rsplit(":", 1)
    uvicorn.run(create_app(settings), host=host, port=int(port), log_config=None)


if __name__ == "__main__":
    main()
