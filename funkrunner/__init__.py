# -*- coding: utf-8 -*-
"""Интерпретатор deploy-планов SDK и обвязка над kubectl/kn."""

__version__ = "0.1.0"
