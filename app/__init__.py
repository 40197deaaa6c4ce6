# -*- coding: utf-8 -*-
"""
backend/app/__init__.py

Paquete principal 'app' del núcleo de billing.

Subpaquetes:
- shared: infraestructura transversal (config, logging, base de datos)
- modules.bookkeeping: reconciliación de checkout sessions

Autor: Equipo Billing
Fecha: 2026-01-12
"""

# Fin del archivo backend/app/__init__.py
