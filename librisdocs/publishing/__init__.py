"""
publishing/ — Todo lo relacionado con publicar en GitHub.

Módulos:
- github_api.py → Protocol HostingAPI + cliente REST de GitHub
- publisher.py  → Asegura que el branch y el archivo existan y estén al día
"""
