"""
Package des sondes locales de l'agent de métadonnées

Ce package contient :
- Collecteur de base (classe abstraite)
- Fournisseurs de source (nom d'hôte)
- Sondes EC2, système, matériel et processus
"""
