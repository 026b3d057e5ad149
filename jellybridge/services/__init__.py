"""
Couche services applicatifs (cas d'utilisation).

Les services orchestrent la logique du domaine :
- sync : réconciliation complète (découverte -> dossiers -> correspondance -> nettoyage)
- discover : dédoublonnage, placeholders, invalidation par network
- matching : partition placeholders / vraie bibliothèque
- metadata_store : dossiers placeholder (metadata.json + NFO)
- placeholder_generator : vidéos placeholder mises en cache
- cleanup : retention et dossiers orphelins
- sort, recycle : opérations de maintenance
- operation_lock : verrou global des opérations mutantes

Les services dépendent des ports de core/, jamais des adaptateurs concrets.
"""
