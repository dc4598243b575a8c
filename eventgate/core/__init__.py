"""
eventgate.core

Package “cœur” : tout ce qui est transversal (cross-cutting concerns) et ne dépend pas
du contenu des events.

On y trouve :

- settings
  Configuration (variables d’environnement / .env, sections server, geo, log, metrics…).

- appconfig
  Registre construit une fois au démarrage : nom du serveur, adresse d’écoute, resolvers,
  service d’autorisation, et liste ordonnée des ressources à fermer à l’arrêt.

- identity
  Bootstrap du nom du serveur (configuration ou fichier persistant).

- errors
  Taxonomie d’erreurs + format d’erreur API uniforme.

- logging
  Logs JSON (nom du serveur, request_id, extras), fichier avec rotation optionnel.

- request_context
  request_id de la requête courante + extraction de l’IP client.

- security
  Service d’autorisation par token.

- metrics
  Compteurs Prometheus (events acceptés / en erreur / ignorés).
"""
