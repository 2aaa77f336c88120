"""Modelos y entidades del dominio.

Por qué:
- Aquí viven estructuras de datos puras y estrictas (Pydantic v2).
- El dominio no sabe nada de git, HTTP ni de la CLI: solo conceptos del problema.
"""
