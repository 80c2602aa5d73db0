"""Building blocks for metrics recorders: storage, histograms, quantiles, snapshots and layers."""

__version__ = "0.1.0"