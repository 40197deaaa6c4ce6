# -*- coding: utf-8 -*-
"""
backend/app/shared/__init__.py

Infraestructura compartida: configuración, logging y base de datos.

No inicializa settings en import-time para evitar efectos colaterales
durante la recolección de tests.
"""

# Fin del archivo backend/app/shared/__init__.py
