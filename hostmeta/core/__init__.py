"""
Module Core - Composants principaux de l'agent de métadonnées

Ce module contient les fonctionnalités de base de l'agent :
- Configuration et logging
- Filtre de champs
- Construction du document de métadonnées
- Envoi à l'intake et politique de tentatives
- Planification des envois
"""
