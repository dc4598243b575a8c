"""
eventgate.services

Package “services” : logique applicative indépendante des endpoints HTTP.

Rôle (fonctionnel) :
- facts : type Fact et accesseurs typés
- geo / useragent : contrats de résolution + implémentations (MaxMind, user-agents)
- preprocessor : préparation des facts API (source, IP, enrichissement)
- event_log : écriture aval des facts enrichis

Principe :
- eventgate.api = transport HTTP (routes, validation, dépendances)
- eventgate.services = traitement des facts (réutilisable, testable sans HTTP)
"""
