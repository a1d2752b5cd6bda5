# -*- coding: utf-8 -*-
"""
Command-line programs: the per-branch log exporter and the KOC bulk
importer/processor.
"""
