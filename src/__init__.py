# -*- coding: utf-8 -*-
"""
Offline circulation tools: KOC export, import and processing.
"""
