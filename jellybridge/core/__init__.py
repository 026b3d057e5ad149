"""
Couche domaine de JellyBridge.

Contient les entités du catalogue, les ports (interfaces abstraites)
et la hiérarchie d'erreurs partagée par les services et adaptateurs.
Aucune dépendance vers adapters/ ou services/.
"""
