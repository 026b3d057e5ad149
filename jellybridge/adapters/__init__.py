"""
Couche adaptateurs (infrastructure).

Implémentations concrètes des ports du domaine :
- api/ : client du catalogue Jellyseerr (httpx + tenacity)
- library/ : passerelle vers le serveur Jellyfin
- cli/ : commandes typer
"""
