"""
eventgate

Package racine du serveur d’ingestion d’events eventgate.

Rôle (fonctionnel) :
- Reçoit des events de tracking (“facts”) via API, les enrichit (geo, user-agent)
  et les écrit dans le journal des events.
- Sert de point d’ancrage pour les imports : `from eventgate...`

Organisation (haute-level) :
- eventgate.api      : routes FastAPI (contrats HTTP, dépendances)
- eventgate.core     : briques transverses (settings, registre AppConfig, identité, logs,
                       erreurs, sécurité, métriques)
- eventgate.schemas  : schémas Pydantic (sorties API)
- eventgate.services : logique métier (preprocessing des facts, resolvers, journal des events)
"""
