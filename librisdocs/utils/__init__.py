"""
utils/ — Utilidades compartidas.

Módulos:
- logger.py     → Logging con Rich (+ archivo opcional)
- validators.py → Normalización de inputs del Action
- actions.py    → Inputs, outputs y ::error:: del runner
"""
