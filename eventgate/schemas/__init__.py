"""
eventgate.schemas

Schémas API (Pydantic) : réponses des endpoints d’ingestion et de statut.
Les facts eux-mêmes restent des dicts JSON libres.
"""
