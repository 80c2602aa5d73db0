"""Recorder layers: stacking, name prefixing, pattern filtering and routing."""