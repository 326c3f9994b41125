"""
generation/ — Generación de la documentación.

Módulos:
- client.py → Cliente de la API de Libris (LibrisConfig, LibrisClient)
"""
