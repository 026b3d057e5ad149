"""
Utilitaires partagés : nettoyage des noms de dossiers et verrous par clé.
"""
